from __future__ import annotations

import json
from pathlib import Path

from cellar.state import (
    default_state,
    float_setting,
    load_state,
    prune_last_bottle,
    resolve_backend_url,
    resolve_log_dir,
    save_state,
)


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_state(tmp_path / "cellar_state.json") == default_state()


def test_partial_file_is_backfilled(tmp_path) -> None:
    path = tmp_path / "cellar_state.json"
    path.write_text(json.dumps({"last_bottle_id": "b1"}), encoding="utf-8")

    state = load_state(path)

    assert state["last_bottle_id"] == "b1"
    assert state["request_timeout"] == 30.0
    assert state["log_dir"] == ".cellar/logs"


def test_unreadable_file_falls_back_to_defaults(tmp_path) -> None:
    path = tmp_path / "cellar_state.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_state(path) == default_state()


def test_save_then_load(tmp_path) -> None:
    path = tmp_path / "cellar_state.json"
    state = default_state()
    state["last_bottle_id"] = "b7"

    save_state(path, state)

    assert load_state(path)["last_bottle_id"] == "b7"


def test_backend_url_resolution_order(monkeypatch) -> None:
    monkeypatch.delenv("CELLAR_BACKEND_URL", raising=False)
    assert resolve_backend_url({}) == "http://127.0.0.1:7878"
    assert resolve_backend_url({"backend_url": "http://box:9000/"}) == "http://box:9000"

    monkeypatch.setenv("CELLAR_BACKEND_URL", "http://env:1234")
    assert resolve_backend_url({"backend_url": "http://box:9000"}) == "http://env:1234"


def test_log_dir_relative_and_absolute(tmp_path) -> None:
    assert resolve_log_dir(tmp_path, {}) == tmp_path / ".cellar" / "logs"
    absolute = tmp_path / "elsewhere"
    assert resolve_log_dir(Path("/ignored"), {"log_dir": str(absolute)}) == absolute


def test_float_setting_rejects_garbage() -> None:
    assert float_setting({"request_timeout": "12"}, "request_timeout", 30.0) == 12.0
    assert float_setting({"request_timeout": "soon"}, "request_timeout", 30.0) == 30.0
    assert float_setting({"request_timeout": 0}, "request_timeout", 30.0) == 30.0
    assert float_setting(None, "request_timeout", 30.0) == 30.0


def test_prune_last_bottle() -> None:
    state = {"last_bottle_id": "gone"}
    prune_last_bottle(state, ["b1"])
    assert state["last_bottle_id"] == ""

    state = {"last_bottle_id": "b1"}
    prune_last_bottle(state, ["b1"])
    assert state["last_bottle_id"] == "b1"
