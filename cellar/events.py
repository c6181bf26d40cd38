#===============================================================================
#  Cellar_Cockpit | events.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Event bridge: turns backend push events into typed Qt signals, plus the
#  poller thread that pulls those events from the backend.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from PySide6.QtCore import QObject, Signal

from .constants import CHANNEL_ENGINE_STATUS, CHANNEL_LIBRARY_CHANGED, CHANNEL_STATUS_UPDATE
from .errors import BackendError
from .models import TaskStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusReport:
    message: str
    state: Optional[TaskStatus] = None   # set only when the backend sends one

    @staticmethod
    def from_payload(payload: Any) -> "StatusReport":
        if isinstance(payload, dict):
            raw_state = payload.get("state")
            try:
                state = TaskStatus(raw_state) if raw_state else None
            except ValueError:
                state = None
            return StatusReport(message=str(payload.get("message") or ""), state=state)
        return StatusReport(message="" if payload is None else str(payload))


class EventBridge(QObject):
    """Forwards push-event payloads to subscribers. No business logic."""

    status_update = Signal(object)     # StatusReport
    engine_status = Signal(object)     # StatusReport
    library_changed = Signal(str)      # bottle id

    def deliver(self, channel: str, payload: Any) -> bool:
        if channel == CHANNEL_STATUS_UPDATE:
            self.status_update.emit(StatusReport.from_payload(payload))
        elif channel == CHANNEL_ENGINE_STATUS:
            self.engine_status.emit(StatusReport.from_payload(payload))
        elif channel == CHANNEL_LIBRARY_CHANGED:
            bottle_id = payload.get("bottle_id") if isinstance(payload, dict) else payload
            if not bottle_id:
                logger.debug("library-changed without bottle id: %r", payload)
                return False
            self.library_changed.emit(str(bottle_id))
        else:
            logger.debug("Ignoring event on unknown channel %r", channel)
            return False
        return True


class EventPoller:
    """Background loop pulling events from the backend into the bridge.

    Events arrive in emission order per channel; the bridge signals are queued
    onto the receivers' (UI) thread by Qt.
    """

    def __init__(self, backend, bridge: EventBridge, interval: float = 1.0, wait: float = 20.0):
        self._backend = backend
        self._bridge = bridge
        self._interval = interval
        self._wait = wait
        self._cursor = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="event-poller", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def poll_once(self) -> int:
        """Fetch one batch and deliver it. Returns the number of events delivered."""
        events, self._cursor = self._backend.poll_events(self._cursor, self._wait)
        delivered = 0
        for event in events:
            channel = str(event.get("channel") or "")
            if self._bridge.deliver(channel, event.get("payload")):
                delivered += 1
        return delivered

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                delivered = self.poll_once()
            except BackendError as e:
                logger.warning("Event poll failed: %s", e)
                delivered = 0
            if not delivered:
                self._stop.wait(self._interval)
