#===============================================================================
#  Cellar_Cockpit | session.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Session controller: owns the bottle list, which bottle is open, its app
#  library and the active detail tab. Bottle-level operations (delete,
#  rename, cover, engine, launch, repair) go through here.
#
#  Notes
#  -----
#  - Every asynchronous callback captures the bottle id it was issued for and
#    compares it with the live selection before touching state. Late
#    responses for a bottle that is no longer open are dropped.
#  - Selecting a bottle builds a fresh AppLibrary; the previous one is closed
#    so its in-flight scans can never leak into the new view.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Signal, Slot

from .constants import DEFAULT_TAB, TASK_ENGINE_SETUP, TASK_REPAIR, VIEW_TABS
from .errors import PreconditionError
from .models import Bottle, RegisteredApp
from .reconciler import AppLibrary, LibraryViews
from .state import prune_last_bottle

logger = logging.getLogger(__name__)


def _exe_label(path: str) -> str:
    return path.replace("\\", "/").rstrip("/").split("/")[-1] or path


class SessionController(QObject):
    bottles_changed = Signal()
    selection_changed = Signal(str)      # "" when nothing is open
    bottle_changed = Signal()            # detail of the open bottle refreshed
    apps_changed = Signal()
    tab_changed = Signal(str)
    engine_ready_changed = Signal(bool)

    def __init__(self, api, activity, tasks, state: Optional[Dict[str, Any]] = None, parent=None):
        super().__init__(parent)
        self._api = api
        self._activity = activity
        self._tasks = tasks
        self._state = state if state is not None else {}

        self.bottles: List[Bottle] = []
        self.selected_id: Optional[str] = None
        self.current_bottle: Optional[Bottle] = None
        self.library: Optional[AppLibrary] = None
        self.active_tab = DEFAULT_TAB
        self.engine_ready: Optional[bool] = None
        self._list_issued = 0
        self._list_applied = 0

    # ----------------------------
    # Startup / bottle list
    # ----------------------------
    def start(self) -> None:
        """Initial load: bottle list (reopening the last bottle) and engine readiness check."""
        self.load_bottles(on_loaded=self._restore_selection)
        self.check_engine()

    def load_bottles(self, on_loaded: Optional[Callable[[], None]] = None) -> None:
        """Fetch the bottle list. A response older than the last applied one is dropped."""
        self._list_issued += 1
        ticket = self._list_issued

        def done(bottles: List[Bottle]) -> None:
            if ticket <= self._list_applied:
                logger.debug("Dropping out-of-date bottle list #%d", ticket)
                if on_loaded:
                    on_loaded()
                return
            self._list_applied = ticket
            self.bottles = list(bottles)
            ids = {b.id for b in self.bottles}
            prune_last_bottle(self._state, ids)
            if self.selected_id is not None and self.selected_id not in ids:
                self._activity.add("Open bottle no longer exists")
                self.deselect()
            self.bottles_changed.emit()
            if on_loaded:
                on_loaded()

        def failed(msg: str) -> None:
            self._activity.add(f"Error loading bottles: {msg}")

        self._api.list_bottles(done, failed)

    def bottle(self, bottle_id: str) -> Optional[Bottle]:
        for b in self.bottles:
            if b.id == bottle_id:
                return b
        return None

    def add_created_bottle(self, bottle: Bottle) -> None:
        """Take over a bottle produced by the creation workflow.

        Lists already in flight predate this bottle and are superseded.
        """
        self._list_applied = self._list_issued
        if self.bottle(bottle.id) is None:
            self.bottles.append(bottle)
            self.bottles_changed.emit()
        self.load_bottles()

    def _restore_selection(self) -> None:
        last = self._state.get("last_bottle_id") or ""
        if last and self.selected_id is None and self.bottle(last) is not None:
            self.select(last)

    # ----------------------------
    # Selection
    # ----------------------------
    @property
    def views(self) -> LibraryViews:
        return self.library.views if self.library else LibraryViews()

    def select(self, bottle_id: str) -> None:
        bottle = self.bottle(bottle_id)
        if bottle is None:
            raise PreconditionError(f"Unknown bottle: {bottle_id}")

        if self.library is not None:
            self.library.close()

        self.selected_id = bottle_id
        self.current_bottle = bottle
        self.active_tab = DEFAULT_TAB
        self._state["last_bottle_id"] = bottle_id
        self.library = AppLibrary(
            self._api,
            bottle_id,
            self._activity,
            registry=bottle.apps,
            on_change=self._on_apps_changed,
            on_detail=self._on_detail,
        )

        self.selection_changed.emit(bottle_id)
        self.tab_changed.emit(self.active_tab)
        self.apps_changed.emit()
        self.refresh()

    def deselect(self) -> None:
        if self.library is not None:
            self.library.close()
        self.library = None
        self.selected_id = None
        self.current_bottle = None
        self.active_tab = DEFAULT_TAB
        self._state["last_bottle_id"] = ""

        self.selection_changed.emit("")
        self.tab_changed.emit(self.active_tab)
        self.apps_changed.emit()

    def refresh(self) -> None:
        """Rescan apps and refetch the bottle detail (order-independent)."""
        if self.library is None:
            return
        self.library.rescan()
        self.library.refresh_registry()

    def set_active_tab(self, tab: str) -> None:
        if tab not in VIEW_TABS:
            raise ValueError(f"Unknown view tab: {tab}")
        if tab != self.active_tab:
            self.active_tab = tab
            self.tab_changed.emit(tab)

    @Slot(str)
    def on_library_changed(self, bottle_id: str) -> None:
        if bottle_id != self.selected_id:
            logger.debug("Ignoring library change for %s (open: %s)", bottle_id, self.selected_id)
            return
        self.refresh()

    def _on_apps_changed(self, _views: LibraryViews) -> None:
        self.apps_changed.emit()

    def _on_detail(self, bottle: Bottle) -> None:
        if bottle.id != self.selected_id:
            return
        self.current_bottle = bottle
        self.bottles = [bottle if b.id == bottle.id else b for b in self.bottles]
        self.bottle_changed.emit()

    # ----------------------------
    # Apps of the open bottle
    # ----------------------------
    def _require_library(self) -> AppLibrary:
        if self.library is None:
            raise PreconditionError("No bottle is open")
        return self.library

    def rescan(self) -> None:
        self._require_library().rescan()

    def pin(self, app) -> None:
        self._require_library().pin(app)

    def unpin(self, path: str) -> None:
        self._require_library().unpin(path)

    def run_executable(self, path: str) -> None:
        bottle_id = self._require_library().bottle_id
        self._activity.add(f"Launching {_exe_label(path)}...")
        self._api.run_executable(
            path,
            bottle_id,
            lambda _: None,
            lambda msg: self._activity.add(f"Launch Error: {msg}"),
        )

    def pin_shortcut(self, path: str) -> None:
        """Pin an executable picked by hand; it need not show up in any scan."""
        label = _exe_label(path)
        name = label[:-4] if label.lower().endswith(".exe") else label
        self.pin(RegisteredApp(path=path, name=name or label, pinned=True))

    def open_bottle_dir(self) -> None:
        bottle_id = self._require_library().bottle_id
        self._api.open_bottle_dir(
            bottle_id,
            lambda _: None,
            lambda msg: self._activity.add(f"Open folder error: {msg}"),
        )

    # ----------------------------
    # Bottle operations
    # ----------------------------
    def delete_bottle(self, bottle_id: str) -> None:
        """Irreversible. The caller is responsible for asking for confirmation."""
        label = self._label(bottle_id)

        def done(_result) -> None:
            self._activity.add(f"Deleted bottle '{label}'")
            if self.selected_id == bottle_id:
                self.deselect()
            self.load_bottles()

        self._api.delete_bottle(bottle_id, done, lambda msg: self._activity.add(f"Delete error: {msg}"))

    def rename_bottle(self, bottle_id: str, new_name: str) -> None:
        cleaned = (new_name or "").strip()
        if not cleaned:
            raise PreconditionError("A bottle name is required")
        self._api.rename_bottle(
            bottle_id,
            cleaned,
            lambda _: self._after_bottle_change(bottle_id),
            lambda msg: self._activity.add(f"Rename error: {msg}"),
        )

    def set_cover(self, bottle_id: str, cover: str) -> None:
        self._api.set_bottle_cover(
            bottle_id,
            cover,
            lambda _: self._after_bottle_change(bottle_id),
            lambda msg: self._activity.add(f"Cover error: {msg}"),
        )

    def set_engine(self, bottle_id: str, engine_path: str) -> None:
        def done(_result) -> None:
            self._activity.add(f"Engine set for '{self._label(bottle_id)}'")
            self._after_bottle_change(bottle_id)

        self._api.set_bottle_engine(
            bottle_id, engine_path, done, lambda msg: self._activity.add(f"Engine error: {msg}")
        )

    def reset_engine(self, bottle_id: str) -> None:
        def done(_result) -> None:
            self._activity.add(f"Engine reset for '{self._label(bottle_id)}'")
            self._after_bottle_change(bottle_id)

        self._api.reset_bottle_engine(bottle_id, done, lambda msg: self._activity.add(f"Engine error: {msg}"))

    def _after_bottle_change(self, bottle_id: str) -> None:
        self.load_bottles()
        if self.selected_id == bottle_id and self.library is not None:
            self.library.refresh_registry()

    def _label(self, bottle_id: str) -> str:
        b = self.bottle(bottle_id)
        return b.name if b else bottle_id

    # ----------------------------
    # Engine + background operations
    # ----------------------------
    def check_engine(self) -> None:
        def done(ready: bool) -> None:
            self.engine_ready = ready
            self.engine_ready_changed.emit(ready)

        self._api.check_engine(done, lambda msg: self._activity.add(f"Engine check failed: {msg}"))

    def deploy_engine(self) -> None:
        self._tasks.report_status(TASK_ENGINE_SETUP, "Requesting engine deployment...")

        def failed(msg: str) -> None:
            self._tasks.report_status(TASK_ENGINE_SETUP, f"Error: {msg}")
            self._activity.add(f"Engine deployment error: {msg}")

        self._api.deploy_engine(lambda _: None, failed)

    def repair_graphics(self) -> None:
        bottle_id = self._require_library().bottle_id
        self._tasks.report_status(TASK_REPAIR, "Requesting graphics repair...")

        def failed(msg: str) -> None:
            self._tasks.report_status(TASK_REPAIR, f"Error: {msg}")
            self._activity.add(f"Graphics repair error: {msg}")

        self._api.repair_graphics(bottle_id, lambda _: None, failed)

    @Slot(str)
    def on_task_updated(self, key: str) -> None:
        if key != TASK_ENGINE_SETUP:
            return
        task = self._tasks.get(key)
        if task is not None and task.is_complete and not task.has_error:
            self.check_engine()
