#===============================================================================
#  Cellar_Cockpit | context.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Builds the controllers and connects the event bridge to them:
#    status-update   -> task "repair-task"
#    engine-status   -> task "engine-setup"
#    library-changed -> session refresh (open bottle only)
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .activity_log import ActivityLog
from .api import CellarApi
from .backend import HttpBackend, ThreadedDispatcher
from .constants import ACTIVITY_LOG_FILE_NAME, DEFAULT_EVENT_POLL_INTERVAL, DEFAULT_REQUEST_TIMEOUT
from .events import EventBridge, EventPoller
from .session import SessionController
from .state import float_setting, resolve_backend_url, resolve_log_dir
from .tasks import TaskRegistry
from .wizard import BottleCreationWorkflow


@dataclass
class CellarContext:
    api: CellarApi
    activity: ActivityLog
    tasks: TaskRegistry
    bridge: EventBridge
    session: SessionController
    poller: Optional[EventPoller] = None

    def new_workflow(self) -> BottleCreationWorkflow:
        """A fresh creation workflow whose result is handed to the session.

        A run that fails after provisioning still hands over its bottle: the
        completed steps are kept, so the bottle exists on the backend.
        """
        wf = BottleCreationWorkflow(self.api, self.activity)
        wf.succeeded.connect(self.session.add_created_bottle)

        def on_failed(_msg: str) -> None:
            if wf.bottle is not None:
                self.session.add_created_bottle(wf.bottle)

        wf.failed.connect(on_failed)
        return wf

    def shutdown(self) -> None:
        if self.poller is not None:
            self.poller.stop()


def wire_events(bridge: EventBridge, tasks: TaskRegistry, session: SessionController) -> None:
    bridge.status_update.connect(tasks.on_status_update)
    bridge.engine_status.connect(tasks.on_engine_status)
    bridge.library_changed.connect(session.on_library_changed)
    tasks.task_updated.connect(session.on_task_updated)


def build_context(
    dispatcher,
    state: Optional[Dict[str, Any]] = None,
    activity: Optional[ActivityLog] = None,
    poller_backend=None,
) -> CellarContext:
    """Assemble controllers around a dispatcher (threaded in the app, manual in tests)."""
    state = state if state is not None else {}
    api = CellarApi(dispatcher)
    activity = activity or ActivityLog()
    tasks = TaskRegistry()
    bridge = EventBridge()
    session = SessionController(api, activity, tasks, state)
    wire_events(bridge, tasks, session)

    poller = None
    if poller_backend is not None:
        interval = float_setting(state, "event_poll_interval", DEFAULT_EVENT_POLL_INTERVAL)
        poller = EventPoller(poller_backend, bridge, interval=interval)

    return CellarContext(api=api, activity=activity, tasks=tasks, bridge=bridge, session=session, poller=poller)


def build_http_context(base_dir: Path, state: Dict[str, Any]) -> CellarContext:
    backend = HttpBackend(
        resolve_backend_url(state),
        timeout=float_setting(state, "request_timeout", DEFAULT_REQUEST_TIMEOUT),
    )
    activity = ActivityLog(resolve_log_dir(base_dir, state) / ACTIVITY_LOG_FILE_NAME)
    return build_context(ThreadedDispatcher(backend), state, activity, poller_backend=backend)
