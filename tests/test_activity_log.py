from __future__ import annotations

from datetime import datetime

from cellar.activity_log import ActivityLog


def _clock():
    return datetime(2026, 10, 19, 9, 5, 7)


def test_add_formats_timestamp_and_emits() -> None:
    log = ActivityLog(clock=_clock)
    seen = []
    log.entry_added.connect(seen.append)

    line = log.add("Launching setup.exe...")

    assert line == "[09:05:07] Launching setup.exe..."
    assert log.entries() == [line]
    assert seen == [line]


def test_file_is_append_only_across_clear(tmp_path) -> None:
    path = tmp_path / "logs" / "activity.log"
    log = ActivityLog(path, clock=_clock)

    log.add("one")
    log.clear()
    log.add("two")

    assert log.entries() == ["[09:05:07] two"]
    assert path.read_text(encoding="utf-8").splitlines() == ["[09:05:07] one", "[09:05:07] two"]


def test_entries_returns_a_copy() -> None:
    log = ActivityLog(clock=_clock)
    log.add("x")
    log.entries().append("mutated")
    assert len(log.entries()) == 1
