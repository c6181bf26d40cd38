#===============================================================================
#  Cellar_Cockpit | wizard.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Bottle creation workflow. Four backend calls, each started only after the
#  previous one succeeded:
#
#    1) provision   create the bottle record (name + environment type)
#    2) engine      bind the selected runner to the new bottle
#    3) initialize  first boot of the runtime environment
#    4) materialize install the template's bundled software (if any)
#
#  A failing step stops the run. Completed steps are NOT rolled back: a bottle
#  that fails at step 3 stays provisioned and engine-bound until the user
#  deletes it.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from .errors import PreconditionError
from .models import Bottle, BottleTemplate, WineRunner
from .runners import default_runner

logger = logging.getLogger(__name__)


class WorkflowStep(str, Enum):
    PROVISION = "provision"
    ENGINE = "engine"
    INITIALIZE = "initialize"
    MATERIALIZE = "materialize"


class WorkflowState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


STEP_LABELS = {
    WorkflowStep.PROVISION: "creating bottle",
    WorkflowStep.ENGINE: "engine assignment",
    WorkflowStep.INITIALIZE: "initialization",
    WorkflowStep.MATERIALIZE: "template install",
}


class BottleCreationWorkflow(QObject):
    """One bottle creation. Create a new instance per wizard run."""

    status_changed = Signal(str)
    options_loaded = Signal()
    succeeded = Signal(object)     # Bottle
    failed = Signal(str)

    def __init__(self, api, activity=None, parent=None):
        super().__init__(parent)
        self._api = api
        self._activity = activity

        self.name = ""
        self.runner: Optional[WineRunner] = None
        self.template: Optional[BottleTemplate] = None
        self.runners: List[WineRunner] = []
        self.templates: List[BottleTemplate] = []

        self.state = WorkflowState.IDLE
        self.status = ""
        self.error = ""
        self.bottle: Optional[Bottle] = None
        self.current_step: Optional[WorkflowStep] = None
        self.completed_steps: List[WorkflowStep] = []

    # ----------------------------
    # Options (templates + runner candidates)
    # ----------------------------
    def load_options(self) -> None:
        """Fetch templates and runner candidates once for this run."""
        pending = {"templates", "runners"}

        def settle(which: str) -> None:
            pending.discard(which)
            if not pending:
                if self.runner is None:
                    self.runner = default_runner(self.runners, self.template)
                self.options_loaded.emit()

        def templates_done(templates: List[BottleTemplate]) -> None:
            self.templates = list(templates)
            if self.template is None and self.templates:
                self.template = self.templates[0]
            settle("templates")

        def runners_done(runners: List[WineRunner]) -> None:
            self.runners = list(runners)
            settle("runners")

        def failed(which: str):
            def inner(msg: str) -> None:
                self._log(f"Error loading {which}: {msg}")
                settle(which)
            return inner

        self._api.list_templates(templates_done, failed("templates"))
        self._api.list_runners(runners_done, failed("runners"))

    def select_template(self, template: BottleTemplate) -> None:
        self.template = template

    def select_runner(self, runner: WineRunner) -> None:
        self.runner = runner

    # ----------------------------
    # Run
    # ----------------------------
    def validate(self) -> None:
        if self.state is WorkflowState.RUNNING:
            raise PreconditionError("Bottle creation is already running")
        if not (self.name or "").strip():
            raise PreconditionError("A bottle name is required")
        if self.runner is None:
            raise PreconditionError("Select a wine engine first")
        if self.template is None:
            raise PreconditionError("Select a template first")

    def start(self) -> None:
        """Run the four steps. Raises PreconditionError before any backend call."""
        self.validate()

        self.state = WorkflowState.RUNNING
        self.error = ""
        self.bottle = None
        self.completed_steps = []

        self._enter(WorkflowStep.PROVISION, "Initializing Bottle...")
        self._api.create_bottle(
            self.name.strip(),
            self.template.environment_type,
            self._on_provisioned,
            self._fail,
        )

    def _on_provisioned(self, bottle: Bottle) -> None:
        self.bottle = bottle
        self.completed_steps.append(WorkflowStep.PROVISION)

        self._enter(WorkflowStep.ENGINE, "Setting up Engine...")
        self._api.set_bottle_engine(bottle.id, self.runner.path, self._on_engine_bound, self._fail)

    def _on_engine_bound(self, _result) -> None:
        self.completed_steps.append(WorkflowStep.ENGINE)

        self._enter(WorkflowStep.INITIALIZE, "Booting Wine...")
        self._api.initialize_bottle(self.bottle.id, self._on_initialized, self._fail)

    def _on_initialized(self, _result) -> None:
        self.completed_steps.append(WorkflowStep.INITIALIZE)

        software = self.template.bundled_software
        if not software:
            self._finish()
            return

        self._enter(WorkflowStep.MATERIALIZE, f"Downloading & Installing {software}...")
        self._api.install_template_dependency(self.bottle.id, self._on_materialized, self._fail)

    def _on_materialized(self, _result) -> None:
        self.completed_steps.append(WorkflowStep.MATERIALIZE)
        self._finish()

    def _finish(self) -> None:
        self.state = WorkflowState.SUCCEEDED
        self.current_step = None
        self._set_status("Complete!")
        self._log(f"Created bottle '{self.bottle.name}'")
        self.succeeded.emit(self.bottle)

    def _fail(self, msg: str) -> None:
        step = self.current_step
        self.state = WorkflowState.FAILED
        self.error = msg
        self._set_status(f"Error: {msg}")
        label = STEP_LABELS.get(step, "unknown step")
        self._log(f"Bottle creation failed ({label}): {msg}")
        self.failed.emit(msg)

    # ----------------------------
    # Helpers
    # ----------------------------
    def _enter(self, step: WorkflowStep, status: str) -> None:
        self.current_step = step
        self._set_status(status)

    def _set_status(self, status: str) -> None:
        self.status = status
        self.status_changed.emit(status)

    def _log(self, msg: str) -> None:
        if self._activity is not None:
            self._activity.add(msg)
        else:
            logger.info("%s", msg)
