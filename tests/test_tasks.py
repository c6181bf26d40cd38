from __future__ import annotations

import pytest

from cellar.errors import PreconditionError
from cellar.events import StatusReport
from cellar.models import TaskKind, TaskStatus
from cellar.tasks import TaskRegistry, classify_status


@pytest.mark.parametrize(
    "message,expected",
    [
        ("Downloading engine...", (False, False)),
        ("Success: installed", (True, False)),
        ("Installation Complete", (True, False)),
        ("Error: checksum mismatch", (False, True)),
        ("Download FAILED", (False, True)),
        ("", (False, False)),
    ],
)
def test_classify_status_substrings(message, expected) -> None:
    assert classify_status(message) == expected


def test_explicit_state_wins_over_substrings() -> None:
    assert classify_status("Reading error_logs folder", TaskStatus.RUNNING) == (False, False)
    assert classify_status("done", TaskStatus.COMPLETE) == (True, False)


def test_latest_message_wins_and_no_duplicate_task() -> None:
    reg = TaskRegistry()

    reg.report_status("engine-setup", "Success: installed")
    reg.report_status("engine-setup", "Retrying download")

    task = reg.get("engine-setup")
    assert reg.count() == 1
    assert task.message == "Retrying download"
    assert (task.is_complete, task.has_error) == (False, False)


def test_known_keys_get_titles_and_kinds() -> None:
    reg = TaskRegistry()
    engine = reg.report_status("engine-setup", "Starting")
    repair = reg.report_status("repair-task", "Starting")
    other = reg.report_status("something-else", "Starting")

    assert (engine.title, engine.kind) == ("Engine Deployment", TaskKind.ENGINE_DEPLOYMENT)
    assert (repair.title, repair.kind) == ("DirectX Repair", TaskKind.REPAIR)
    assert (other.title, other.kind) == ("Background Task", TaskKind.GENERIC)


def test_dismissing_running_task_is_rejected() -> None:
    reg = TaskRegistry()
    reg.report_status("repair-task", "Installing d3dx9...")

    with pytest.raises(PreconditionError):
        reg.dismiss("repair-task")
    assert reg.try_dismiss("repair-task") is False
    assert reg.get("repair-task") is not None


def test_dismissing_finished_task_removes_it() -> None:
    reg = TaskRegistry()
    reg.report_status("repair-task", "Repair complete")
    reg.report_status("engine-setup", "Error: no space left")

    reg.dismiss("repair-task")
    assert reg.try_dismiss("engine-setup") is True

    assert reg.count() == 0


def test_dismissing_missing_key_is_noop() -> None:
    reg = TaskRegistry()
    reg.dismiss("nope")
    assert reg.count() == 0


def test_snapshots_are_copies_in_creation_order() -> None:
    reg = TaskRegistry()
    reg.report_status("b", "one")
    reg.report_status("a", "two")

    snap = reg.tasks()
    snap[0].message = "mutated"

    assert [t.key for t in snap] == ["b", "a"]
    assert reg.get("b").message == "one"


def test_signals_fire_on_update() -> None:
    reg = TaskRegistry()
    updated = []
    changed = []
    reg.task_updated.connect(updated.append)
    reg.changed.connect(lambda: changed.append(True))

    reg.report_status("engine-setup", "Starting")

    assert updated == ["engine-setup"]
    assert changed == [True]


def test_bridge_slots_route_to_fixed_keys() -> None:
    reg = TaskRegistry()

    reg.on_status_update(StatusReport("Installing DirectX..."))
    reg.on_engine_status(StatusReport("Ready", TaskStatus.COMPLETE))

    assert reg.get("repair-task").message == "Installing DirectX..."
    assert reg.get("engine-setup").status is TaskStatus.COMPLETE
