#===============================================================================
#  Cellar_Cockpit | tasks.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Registry of long-running backend operations (engine deployment, graphics
#  repair, ...). Tasks are keyed by a caller-chosen string and upserted by
#  status reports; a key never maps to more than one task.
#
#  Notes
#  -----
#  - The registry never calls the backend. It only consumes push events and
#    the status callbacks of whoever started the operation.
#  - Classification is derived from the latest report only.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal, Slot

from .constants import (
    COMPLETE_MARKERS,
    ERROR_MARKERS,
    GENERIC_TASK_TITLE,
    TASK_ENGINE_SETUP,
    TASK_REPAIR,
    TASK_TITLES,
)
from .errors import PreconditionError
from .models import BackgroundTask, TaskKind, TaskStatus

logger = logging.getLogger(__name__)

TASK_KINDS = {
    TASK_ENGINE_SETUP: TaskKind.ENGINE_DEPLOYMENT,
    TASK_REPAIR: TaskKind.REPAIR,
}


def classify_status(message: str, state: Optional[TaskStatus] = None) -> Tuple[bool, bool]:
    """Return (is_complete, has_error) for one status report.

    An explicit state from the backend wins. Plain strings fall back to a
    case-insensitive substring match.
    """
    if state is not None:
        return state is TaskStatus.COMPLETE, state is TaskStatus.ERROR
    text = (message or "").lower()
    is_complete = any(m in text for m in COMPLETE_MARKERS)
    has_error = any(m in text for m in ERROR_MARKERS)
    return is_complete, has_error


def task_title(key: str) -> str:
    return TASK_TITLES.get(key, GENERIC_TASK_TITLE)


class TaskRegistry(QObject):
    changed = Signal()
    task_updated = Signal(str)     # task key

    def __init__(self, parent=None):
        super().__init__(parent)
        self._lock = threading.RLock()
        self._tasks: Dict[str, BackgroundTask] = {}

    def report_status(self, key: str, message: str, state: Optional[TaskStatus] = None) -> BackgroundTask:
        """Create or update the task for `key` from one status report."""
        is_complete, has_error = classify_status(message, state)
        with self._lock:
            task = self._tasks.get(key)
            if task is None:
                task = BackgroundTask(
                    key=key,
                    title=task_title(key),
                    kind=TASK_KINDS.get(key, TaskKind.GENERIC),
                )
                self._tasks[key] = task
                logger.debug("Task %s created", key)
            task.message = message
            task.is_complete = is_complete
            task.has_error = has_error
            snapshot = task.copy()

        self.task_updated.emit(key)
        self.changed.emit()
        return snapshot

    def dismiss(self, key: str) -> None:
        """Remove a finished task. Active tasks cannot be dismissed."""
        with self._lock:
            task = self._tasks.get(key)
            if task is None:
                return
            if task.is_active:
                raise PreconditionError(f"Task '{task.title}' is still running")
            del self._tasks[key]
        self.changed.emit()

    def try_dismiss(self, key: str) -> bool:
        try:
            self.dismiss(key)
        except PreconditionError as e:
            logger.info("Dismiss ignored: %s", e)
            return False
        return key not in self._tasks

    def get(self, key: str) -> Optional[BackgroundTask]:
        with self._lock:
            task = self._tasks.get(key)
            return task.copy() if task else None

    def tasks(self) -> List[BackgroundTask]:
        """Snapshot in creation order."""
        with self._lock:
            return [t.copy() for t in self._tasks.values()]

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)

    # --- event bridge slots ---
    @Slot(object)
    def on_status_update(self, report) -> None:
        self.report_status(TASK_REPAIR, report.message, report.state)

    @Slot(object)
    def on_engine_status(self, report) -> None:
        self.report_status(TASK_ENGINE_SETUP, report.message, report.state)
