from __future__ import annotations

import pytest

from cellar.context import build_context
from cellar.errors import PreconditionError
from cellar.models import Bottle, BottleTemplate, RegisteredApp, RunnerTier, WineRunner

GPTK = WineRunner(RunnerTier.GPTK, "/engines/gptk/wine64")
STEAM = BottleTemplate("steam_gaming", "Steam Gaming", bundled_software="Steam")


def _bottle(bottle_id: str, apps=(), **extra) -> dict:
    d = {"id": bottle_id, "name": bottle_id.upper(), "path": f"/bottles/{bottle_id}", "apps": list(apps)}
    d.update(extra)
    return d


def _make_session(dispatcher, bottles=("b1", "b2"), state=None):
    ctx = build_context(dispatcher, state=state if state is not None else {})
    session = ctx.session
    session.load_bottles()
    dispatcher.resolve("get_bottles", [_bottle(b) for b in bottles])
    return ctx, session


def _paths(session) -> list:
    return [e.path for e in session.views.entries()]


def test_stale_scan_never_reaches_newly_selected_bottle(dispatcher) -> None:
    _, session = _make_session(dispatcher)

    session.select("b1")
    stale_scan = dispatcher.take("scan_for_apps")
    stale_detail = dispatcher.take("get_bottle_details")
    session.deselect()
    session.select("b2")

    stale_scan.resolve([{"path": "C:/b1/only.exe", "name": "b1 app"}])
    stale_detail.resolve(_bottle("b1", [RegisteredApp("C:/b1/pinned.exe", "P", pinned=True).to_dict()]))
    assert _paths(session) == []

    dispatcher.resolve("scan_for_apps", [{"path": "C:/b2/game.exe", "name": "b2 app"}])
    dispatcher.resolve("get_bottle_details", _bottle("b2"))

    assert _paths(session) == ["C:/b2/game.exe"]
    assert session.current_bottle.id == "b2"


def test_select_resets_tab_and_remembers_bottle(dispatcher) -> None:
    state = {}
    _, session = _make_session(dispatcher, state=state)
    tabs = []
    session.tab_changed.connect(tabs.append)

    session.select("b1")
    session.set_active_tab("engine")
    session.select("b2")

    assert session.active_tab == "apps"
    assert tabs == ["apps", "engine", "apps"]
    assert state["last_bottle_id"] == "b2"
    assert dispatcher.take("scan_for_apps").args == {"bottle_id": "b1"}


def test_select_unknown_bottle_is_rejected(dispatcher) -> None:
    _, session = _make_session(dispatcher)
    with pytest.raises(PreconditionError):
        session.select("nope")
    assert session.selected_id is None


def test_invalid_tab_is_rejected(dispatcher) -> None:
    _, session = _make_session(dispatcher)
    with pytest.raises(ValueError):
        session.set_active_tab("settings")


def test_operations_without_selection_are_rejected(dispatcher) -> None:
    _, session = _make_session(dispatcher)
    for op in (session.rescan, session.repair_graphics):
        with pytest.raises(PreconditionError):
            op()
    with pytest.raises(PreconditionError):
        session.run_executable("C:/setup.exe")


def test_start_restores_last_bottle_and_checks_engine(dispatcher) -> None:
    ctx = build_context(dispatcher, state={"last_bottle_id": "b2"})
    session = ctx.session
    ready = []
    session.engine_ready_changed.connect(ready.append)

    session.start()
    dispatcher.resolve("get_bottles", [_bottle("b1"), _bottle("b2")])
    dispatcher.resolve("check_engine_status", True)

    assert session.selected_id == "b2"
    assert ready == [True]


def test_forgotten_bottle_is_pruned_from_state(dispatcher) -> None:
    state = {"last_bottle_id": "deleted"}
    ctx = build_context(dispatcher, state=state)

    ctx.session.start()
    dispatcher.resolve("get_bottles", [_bottle("b1")])

    assert state["last_bottle_id"] == ""
    assert ctx.session.selected_id is None


def test_library_changed_refreshes_only_open_bottle(dispatcher) -> None:
    ctx, session = _make_session(dispatcher)
    session.select("b1")
    before = len(dispatcher.pending("scan_for_apps"))

    ctx.bridge.deliver("library-changed", {"bottle_id": "b2"})
    assert len(dispatcher.pending("scan_for_apps")) == before

    ctx.bridge.deliver("library-changed", "b1")
    assert len(dispatcher.pending("scan_for_apps")) == before + 1


def test_run_executable_logs_launch_and_error(dispatcher) -> None:
    ctx, session = _make_session(dispatcher)
    session.select("b1")

    session.run_executable("C:\\Games\\setup.exe")
    call = dispatcher.take("run_executable")
    assert call.args == {"path": "C:\\Games\\setup.exe", "bottle_id": "b1"}
    call.reject("no such file")

    entries = ctx.activity.entries()
    assert entries[-2].endswith("Launching setup.exe...")
    assert entries[-1].endswith("Launch Error: no such file")


def test_delete_open_bottle_deselects_and_reloads(dispatcher) -> None:
    ctx, session = _make_session(dispatcher)
    session.select("b1")

    session.delete_bottle("b1")
    dispatcher.resolve("delete_bottle", None)
    assert session.selected_id is None
    dispatcher.resolve("get_bottles", [_bottle("b2")])

    assert [b.id for b in session.bottles] == ["b2"]
    assert any("Deleted bottle 'B1'" in e for e in ctx.activity.entries())


def test_rename_requires_a_name(dispatcher) -> None:
    _, session = _make_session(dispatcher)
    with pytest.raises(PreconditionError):
        session.rename_bottle("b1", "  ")

    session.rename_bottle("b1", " New Name ")
    assert dispatcher.take("rename_bottle").args == {"bottle_id": "b1", "new_name": "New Name"}


def test_detail_refresh_updates_current_bottle(dispatcher) -> None:
    _, session = _make_session(dispatcher)
    session.select("b1")

    dispatcher.resolve("get_bottle_details", _bottle("b1", engine_path="/engines/gptk/wine64"))

    assert session.current_bottle.engine_path == "/engines/gptk/wine64"
    assert session.bottle("b1").engine_path == "/engines/gptk/wine64"


def test_deploy_engine_rejection_marks_task_failed(dispatcher) -> None:
    ctx, session = _make_session(dispatcher)

    session.deploy_engine()
    assert ctx.tasks.get("engine-setup").is_active
    dispatcher.reject("download_engine", "404")

    task = ctx.tasks.get("engine-setup")
    assert task.has_error
    assert task.message == "Error: 404"


def test_engine_setup_success_rechecks_engine(dispatcher) -> None:
    ctx, session = _make_session(dispatcher)
    ready = []
    session.engine_ready_changed.connect(ready.append)

    ctx.bridge.deliver("engine-status", "Engine installed successfully")
    dispatcher.resolve("check_engine_status", True)

    assert ready == [True]
    assert session.engine_ready is True


def test_repair_graphics_uses_repair_task(dispatcher) -> None:
    ctx, session = _make_session(dispatcher)
    session.select("b1")

    session.repair_graphics()
    assert dispatcher.take("install_dx_runtime").args == {"bottle_id": "b1"}
    ctx.bridge.deliver("status-update", {"message": "DirectX installed", "state": "complete"})

    assert ctx.tasks.get("repair-task").is_complete


def test_created_bottle_is_listed(dispatcher) -> None:
    ctx, session = _make_session(dispatcher, bottles=("b1",))
    wf = ctx.new_workflow()

    wf.succeeded.emit(Bottle.from_dict(_bottle("b9")))

    assert session.bottle("b9") is not None
    assert dispatcher.pending("get_bottles")


def _run_until_initialize_fails(dispatcher, ctx) -> None:
    wf = ctx.new_workflow()
    wf.name = "Half Done"
    wf.template = STEAM
    wf.runner = GPTK
    wf.start()
    dispatcher.resolve("create_bottle", _bottle("b-new"))
    dispatcher.resolve("set_bottle_engine", None)
    dispatcher.reject("initialize_bottle", "wineboot crashed")


def test_failed_creation_after_provisioning_is_listed(dispatcher) -> None:
    ctx, session = _make_session(dispatcher, bottles=("b1",))

    _run_until_initialize_fails(dispatcher, ctx)

    assert session.bottle("b-new") is not None
    reload = dispatcher.take("get_bottles")
    reload.resolve([_bottle("b1"), _bottle("b-new", engine_path="/engines/gptk/wine64")])
    assert [b.id for b in session.bottles] == ["b1", "b-new"]
    assert session.bottle("b-new").engine_path == "/engines/gptk/wine64"
    assert "install_template_dependency" not in dispatcher.commands()


def test_failed_provisioning_leaves_listing_alone(dispatcher) -> None:
    ctx, session = _make_session(dispatcher, bottles=("b1",))
    wf = ctx.new_workflow()
    wf.name = "Never"
    wf.template = STEAM
    wf.runner = GPTK

    wf.start()
    dispatcher.reject("create_bottle", "disk full")

    assert [b.id for b in session.bottles] == ["b1"]
    assert dispatcher.pending("get_bottles") == []


def test_older_bottle_list_never_replaces_newer_one(dispatcher) -> None:
    _, session = _make_session(dispatcher, bottles=("b1",))

    session.load_bottles()
    older = dispatcher.take("get_bottles")
    session.load_bottles()
    newer = dispatcher.pending("get_bottles")[1]
    newer.resolve([_bottle("b1"), _bottle("b2")])
    session.select("b2")
    older.resolve([_bottle("b1")])

    assert [b.id for b in session.bottles] == ["b1", "b2"]
    assert session.selected_id == "b2"


def test_created_bottle_survives_list_issued_before_it(dispatcher) -> None:
    _, session = _make_session(dispatcher, bottles=("b1",))

    session.load_bottles()
    before_creation = dispatcher.take("get_bottles")
    session.add_created_bottle(Bottle.from_dict(_bottle("b-new")))
    session.select("b-new")

    before_creation.resolve([_bottle("b1")])
    assert session.selected_id == "b-new"
    assert session.bottle("b-new") is not None

    dispatcher.resolve("get_bottles", [_bottle("b1"), _bottle("b-new")])
    assert session.selected_id == "b-new"


def test_open_bottle_dir_targets_open_bottle(dispatcher) -> None:
    ctx, session = _make_session(dispatcher)
    with pytest.raises(PreconditionError):
        session.open_bottle_dir()

    session.select("b2")
    session.open_bottle_dir()
    call = dispatcher.take("open_bottle_dir")
    assert call.args == {"bottle_id": "b2"}
    call.reject("Bottle not found")

    assert ctx.activity.entries()[-1].endswith("Open folder error: Bottle not found")


def test_pin_shortcut_registers_hand_picked_exe(dispatcher) -> None:
    _, session = _make_session(dispatcher)
    session.select("b1")

    session.pin_shortcut("C:\\Tools\\Editor.exe")

    call = dispatcher.take("pin_app")
    assert call.args == {
        "bottle_id": "b1",
        "app": {"path": "C:\\Tools\\Editor.exe", "name": "Editor", "pinned": True, "priority": False},
    }
