#===============================================================================
#  Cellar_Cockpit | reconciler.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Merges a bottle's persisted app registry (pinned apps, manual shortcuts)
#  with the latest executable scan into two ordered, de-duplicated views:
#
#    priority  = pinned registry apps (registry order)
#                + scan hits flagged is_priority not already pinned (scan order)
#    secondary = remaining scan hits (scan order)
#                + unpinned registry apps absent from the scan
#
#  The executable path is the key (exact match). When a path is in both
#  sources the registry entry supplies the name and pinned flag.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .models import Bottle, DetectedApp, RegisteredApp

logger = logging.getLogger(__name__)

T = TypeVar("T", RegisteredApp, DetectedApp)


@dataclass(frozen=True)
class LibraryEntry:
    """View-ready app row."""
    path: str
    name: str
    pinned: bool = False
    priority: bool = False
    detected: bool = False   # present in the latest scan


@dataclass(frozen=True)
class LibraryViews:
    priority: Tuple[LibraryEntry, ...] = ()
    secondary: Tuple[LibraryEntry, ...] = ()

    def entries(self) -> List[LibraryEntry]:
        return list(self.priority) + list(self.secondary)

    def find(self, path: str) -> Optional[LibraryEntry]:
        for e in self.entries():
            if e.path == path:
                return e
        return None


def _unique_by_path(items: Iterable[T]) -> List[T]:
    seen = set()
    out: List[T] = []
    for item in items:
        if item.path in seen:
            continue
        seen.add(item.path)
        out.append(item)
    return out


def reconcile(registry: Sequence[RegisteredApp], detected: Sequence[DetectedApp]) -> LibraryViews:
    registry = _unique_by_path(registry)
    detected = _unique_by_path(detected)

    by_path: Dict[str, RegisteredApp] = {r.path: r for r in registry}
    detected_paths = {d.path for d in detected}

    def from_scan(d: DetectedApp) -> LibraryEntry:
        r = by_path.get(d.path)
        if r is None:
            return LibraryEntry(d.path, d.name, pinned=False, priority=d.is_priority, detected=True)
        return LibraryEntry(d.path, r.name, pinned=r.pinned, priority=d.is_priority or r.priority, detected=True)

    priority: List[LibraryEntry] = []
    taken = set()

    for r in registry:
        if r.pinned:
            priority.append(
                LibraryEntry(r.path, r.name, pinned=True, priority=r.priority, detected=r.path in detected_paths)
            )
            taken.add(r.path)

    for d in detected:
        if d.is_priority and d.path not in taken:
            priority.append(from_scan(d))
            taken.add(d.path)

    secondary: List[LibraryEntry] = []
    for d in detected:
        if d.path not in taken:
            secondary.append(from_scan(d))
            taken.add(d.path)

    for r in registry:
        if r.path not in taken:
            secondary.append(LibraryEntry(r.path, r.name, pinned=False, priority=r.priority, detected=False))
            taken.add(r.path)

    return LibraryViews(priority=tuple(priority), secondary=tuple(secondary))


class AppLibrary:
    """Reconciled app list for one open bottle.

    Scan results and registry snapshots are each applied only if they are
    newer than the last applied one of the same source, so out-of-order
    completions never roll the view back. Mutations (pin/unpin) never touch
    local state: they are followed by a registry refetch.
    Once closed, every late response is dropped.
    """

    def __init__(
        self,
        api,
        bottle_id: str,
        activity,
        registry: Sequence[RegisteredApp] = (),
        on_change: Optional[Callable[[LibraryViews], None]] = None,
        on_detail: Optional[Callable[[Bottle], None]] = None,
    ):
        self._api = api
        self._bottle_id = bottle_id
        self._activity = activity
        self._on_change = on_change
        self._on_detail = on_detail

        self._lock = threading.RLock()
        self._closed = False
        self._registry: Tuple[RegisteredApp, ...] = tuple(registry)
        self._detected: Tuple[DetectedApp, ...] = ()
        self._views = reconcile(self._registry, self._detected)

        self._issued = {"scan": 0, "registry": 0}
        self._applied = {"scan": 0, "registry": 0}
        self._scans_in_flight = 0
        self.last_scan_error = ""

    # --- read side ---
    @property
    def bottle_id(self) -> str:
        return self._bottle_id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def scanning(self) -> bool:
        return self._scans_in_flight > 0

    @property
    def views(self) -> LibraryViews:
        with self._lock:
            return self._views

    @property
    def registry(self) -> Tuple[RegisteredApp, ...]:
        with self._lock:
            return self._registry

    @property
    def detected(self) -> Tuple[DetectedApp, ...]:
        with self._lock:
            return self._detected

    # --- operations ---
    def rescan(self) -> None:
        if self._closed:
            return
        ticket = self._issue("scan")
        self._scans_in_flight += 1

        def done(apps: List[DetectedApp]) -> None:
            self._scans_in_flight -= 1
            if not self._accept("scan", ticket):
                return
            with self._lock:
                self._detected = tuple(apps)
            self.last_scan_error = ""
            self._recompute()

        def failed(msg: str) -> None:
            self._scans_in_flight -= 1
            if self._closed:
                return
            # previous scan result stays in place
            self.last_scan_error = msg
            self._activity.add(f"Scan error: {msg}")

        self._api.scan_apps(self._bottle_id, done, failed)

    def refresh_registry(self) -> None:
        if self._closed:
            return
        ticket = self._issue("registry")

        def done(bottle: Bottle) -> None:
            if bottle.id != self._bottle_id:
                logger.debug("Dropping detail for %s (library is %s)", bottle.id, self._bottle_id)
                return
            if not self._accept("registry", ticket):
                return
            with self._lock:
                self._registry = tuple(bottle.apps)
            self._recompute()
            if self._on_detail:
                self._on_detail(bottle)

        def failed(msg: str) -> None:
            if self._closed:
                return
            self._activity.add(f"Error loading bottle details: {msg}")

        self._api.get_bottle(self._bottle_id, done, failed)

    def pin(self, app) -> None:
        """Pin a detected app, library row or hand-picked executable (idempotent)."""
        entry = RegisteredApp(
            path=app.path,
            name=app.name,
            pinned=True,
            priority=bool(getattr(app, "is_priority", getattr(app, "priority", False))),
        )
        self._api.pin_app(
            self._bottle_id,
            entry,
            lambda _: self.refresh_registry(),
            lambda msg: self._activity.add(f"Pin error: {msg}"),
        )

    def unpin(self, path: str) -> None:
        self._api.unpin_app(
            self._bottle_id,
            path,
            lambda _: self.refresh_registry(),
            lambda msg: self._activity.add(f"Unpin error: {msg}"),
        )

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._detected = ()
            self._views = LibraryViews()

    # --- internals ---
    def _issue(self, source: str) -> int:
        with self._lock:
            self._issued[source] += 1
            return self._issued[source]

    def _accept(self, source: str, ticket: int) -> bool:
        with self._lock:
            if self._closed:
                logger.debug("Dropping %s response for closed library %s", source, self._bottle_id)
                return False
            if ticket <= self._applied[source]:
                logger.debug("Dropping out-of-date %s response #%d", source, ticket)
                return False
            self._applied[source] = ticket
            return True

    def _recompute(self) -> None:
        with self._lock:
            self._views = reconcile(self._registry, self._detected)
            views = self._views
        if self._on_change:
            self._on_change(views)
