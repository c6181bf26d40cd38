from __future__ import annotations

import pytest

from cellar.models import BackgroundTask, Bottle, BottleTemplate, RunnerTier, TaskStatus, WineRunner


def test_bottle_from_dict_dedupes_registry_by_path() -> None:
    bottle = Bottle.from_dict({
        "id": "b1",
        "name": "Games",
        "path": "/bottles/b1",
        "apps": [
            {"path": "a.exe", "name": "First", "pinned": True},
            {"path": "a.exe", "name": "Second"},
            {"path": "b.exe"},
        ],
    })

    assert [a.path for a in bottle.apps] == ["a.exe", "b.exe"]
    assert bottle.apps[0].name == "First"
    assert bottle.apps[1].name == "b.exe"
    assert bottle.apps[1].pinned is False
    assert bottle.environment == "classic"


def test_bottle_requires_id() -> None:
    with pytest.raises(KeyError):
        Bottle.from_dict({"name": "no id"})


def test_template_environment_follows_bundled_software() -> None:
    steam = BottleTemplate.from_dict({"id": "steam_gaming", "name": "Steam"})
    blank = BottleTemplate.from_dict({"id": "blank", "name": "Blank", "recommended_runner": "GPTK"})

    assert (steam.environment_type, steam.bundled_software) == ("pro", "Steam")
    assert (blank.environment_type, blank.bundled_software) == ("classic", None)
    assert blank.recommended_runner is RunnerTier.GPTK


def test_runner_from_dict_defaults_to_standard() -> None:
    runner = WineRunner.from_dict({"path": "/wine64"})
    assert runner.runner_type is RunnerTier.STANDARD


def test_task_status_precedence() -> None:
    task = BackgroundTask("k", "Title", is_complete=True, has_error=True)
    assert task.status is TaskStatus.ERROR
    assert not task.is_active
    assert BackgroundTask("k", "Title").is_active


def test_task_copy_is_detached_snapshot() -> None:
    task = BackgroundTask("repair-task", "Graphics repair", message="Installing")
    snapshot = task.copy()
    task.message = "Done"
    task.is_complete = True

    assert snapshot == BackgroundTask("repair-task", "Graphics repair", message="Installing")
    assert snapshot.is_active
