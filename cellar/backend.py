#===============================================================================
#  Cellar_Cockpit | backend.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Transport to the execution backend (HTTP via requests) and the dispatcher
#  that turns blocking backend calls into callbacks on the Qt thread.
#
#  Notes
#  -----
#  - The backend does all process/filesystem/engine work. We only send named
#    commands with JSON arguments and read back a JSON result.
#  - Callbacks never run on worker threads: results are emitted through a Qt
#    signal owned by the dispatcher, which lives on the UI thread.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from PySide6.QtCore import QObject, Signal, Slot

from .constants import DEFAULT_REQUEST_TIMEOUT
from .errors import BackendError

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[str], None]


def _error_message(r: requests.Response) -> str:
    try:
        data = r.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    text = (r.text or "").strip()
    return text or f"HTTP {r.status_code}"


class HttpBackend:
    """Blocking request/response client for the backend HTTP surface.

    POST {base_url}/invoke/<command>  body: JSON args -> {"result": ...}
    GET  {base_url}/events?after=<cursor>&wait=<s>   -> {"events": [...], "cursor": n}
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")

    def invoke(self, command: str, args: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/invoke/{command}"
        try:
            r = self._session.post(url, json=args or {}, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise BackendError(f"Timed out calling {command}") from e
        except requests.exceptions.RequestException as e:
            raise BackendError(f"Network error: {e}") from e

        if r.status_code != 200:
            raise BackendError(_error_message(r))

        try:
            data = r.json()
        except ValueError as e:
            raise BackendError(f"Malformed response from {command}") from e
        if isinstance(data, dict) and data.get("error"):
            raise BackendError(str(data["error"]))
        return data.get("result") if isinstance(data, dict) else data

    def poll_events(self, cursor: int, wait: float) -> Tuple[List[Dict[str, Any]], int]:
        """Long-poll for push events emitted after `cursor`."""
        url = f"{self.base_url}/events"
        try:
            r = self._session.get(
                url,
                params={"after": cursor, "wait": wait},
                timeout=self.timeout + wait,
            )
        except requests.exceptions.RequestException as e:
            raise BackendError(f"Network error: {e}") from e
        if r.status_code != 200:
            raise BackendError(_error_message(r))
        try:
            data = r.json()
        except ValueError as e:
            raise BackendError("Malformed event batch") from e
        if not isinstance(data, dict) or not isinstance(data.get("events") or [], list):
            raise BackendError("Malformed event batch")
        try:
            next_cursor = int(data.get("cursor", cursor))
        except (TypeError, ValueError) as e:
            raise BackendError("Malformed event batch") from e

        events = [e for e in data.get("events") or [] if isinstance(e, dict)]
        return events, next_cursor

    def close(self) -> None:
        self._session.close()


class ThreadedDispatcher(QObject):
    """Runs each backend call on a worker thread, reports back on the Qt thread."""

    _completed = Signal(object)

    def __init__(self, backend, parent=None):
        super().__init__(parent)
        self._backend = backend
        self._completed.connect(self._deliver)

    def dispatch(
        self,
        command: str,
        args: Optional[Dict[str, Any]],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        def worker():
            try:
                result = self._backend.invoke(command, args)
            except BackendError as e:
                outcome = (on_failure, str(e))
            except Exception as e:
                logger.exception("Backend call %s crashed", command)
                outcome = (on_failure, str(e) or type(e).__name__)
            else:
                outcome = (on_success, result)
            self._completed.emit(outcome)

        threading.Thread(target=worker, name=f"backend-{command}", daemon=True).start()

    @Slot(object)
    def _deliver(self, outcome) -> None:
        callback, value = outcome
        callback(value)
