#===============================================================================
#  Cellar_Cockpit | wizard_dialog.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  "New Bottle" dialog. Collects name, template and engine, then drives a
#  BottleCreationWorkflow and shows its status line until it settles.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from .constants import METRO_BG
from .errors import PreconditionError
from .runners import describe_runner
from .wizard import BottleCreationWorkflow, WorkflowState


class NewBottleDialog(QDialog):
    def __init__(self, workflow: BottleCreationWorkflow, parent=None):
        super().__init__(parent)
        self.setWindowTitle("New Bottle")
        self.setMinimumWidth(460)
        self.setStyleSheet(f"QDialog {{ background: {METRO_BG}; }} QLabel {{ color: white; }}")

        self.workflow = workflow

        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("e.g. Steam Games")
        form.addRow("Name", self.name_edit)

        self.template_combo = QComboBox()
        self.template_combo.currentIndexChanged.connect(self._template_picked)
        form.addRow("Template", self.template_combo)

        self.template_desc = QLabel("")
        self.template_desc.setWordWrap(True)
        form.addRow("", self.template_desc)

        self.runner_combo = QComboBox()
        self.runner_combo.currentIndexChanged.connect(self._runner_picked)
        form.addRow("Engine", self.runner_combo)

        layout.addLayout(form)

        self.status_label = QLabel("Loading templates and engines…")
        self.status_label.setAlignment(Qt.AlignLeft)
        layout.addWidget(self.status_label)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self.btn_create = QPushButton("Create")
        self.btn_create.setEnabled(False)
        self.btn_create.clicked.connect(self.create)
        buttons.addWidget(self.btn_create)
        self.btn_close = QPushButton("Close")
        self.btn_close.clicked.connect(self.reject)
        buttons.addWidget(self.btn_close)
        layout.addLayout(buttons)

        workflow.options_loaded.connect(self._fill_options)
        workflow.status_changed.connect(self.status_label.setText)
        workflow.succeeded.connect(lambda _bottle: self._settled(ok=True))
        workflow.failed.connect(lambda _msg: self._settled(ok=False))
        workflow.load_options()

    def _fill_options(self) -> None:
        self.template_combo.blockSignals(True)
        self.template_combo.clear()
        for t in self.workflow.templates:
            self.template_combo.addItem(t.name, t.id)
        if self.workflow.template is not None:
            self.template_combo.setCurrentIndex(self.workflow.templates.index(self.workflow.template))
        self.template_combo.blockSignals(False)

        self.runner_combo.blockSignals(True)
        self.runner_combo.clear()
        for r in self.workflow.runners:
            self.runner_combo.addItem(describe_runner(r), r.path)
        if self.workflow.runner is not None:
            self.runner_combo.setCurrentIndex(self.workflow.runners.index(self.workflow.runner))
        self.runner_combo.blockSignals(False)

        self._show_template_description()
        if not self.workflow.runners:
            self.status_label.setText("No wine engine detected. Deploy the engine first.")
        else:
            self.status_label.setText("")
        self.btn_create.setEnabled(True)

    def _template_picked(self, index: int) -> None:
        if 0 <= index < len(self.workflow.templates):
            self.workflow.select_template(self.workflow.templates[index])
            self._show_template_description()

    def _runner_picked(self, index: int) -> None:
        if 0 <= index < len(self.workflow.runners):
            self.workflow.select_runner(self.workflow.runners[index])

    def _show_template_description(self) -> None:
        t = self.workflow.template
        if t is None:
            self.template_desc.setText("")
            return
        text = t.description
        if t.bundled_software:
            text = f"{text}\nIncludes {t.bundled_software}.".strip()
        self.template_desc.setText(text)

    def create(self) -> None:
        self.workflow.name = self.name_edit.text()
        try:
            self.workflow.start()
        except PreconditionError as e:
            self.status_label.setText(str(e))
            return
        self._set_inputs_enabled(False)

    def _settled(self, ok: bool) -> None:
        self._set_inputs_enabled(not ok)
        self.btn_create.setEnabled(not ok)
        if ok:
            self.btn_close.setText("Done")

    def _set_inputs_enabled(self, enabled: bool) -> None:
        for w in (self.name_edit, self.template_combo, self.runner_combo, self.btn_create):
            w.setEnabled(enabled)
        self.btn_close.setEnabled(enabled or self.workflow.state is not WorkflowState.RUNNING)
