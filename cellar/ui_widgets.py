#===============================================================================
#  Cellar_Cockpit | ui_widgets.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Reusable UI widgets (tile list, task list). Keeps the main window smaller.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from typing import Iterable

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QListWidget, QListWidgetItem

from .constants import GRID_SIZE
from .models import BackgroundTask, TaskStatus

TASK_COLORS = {
    TaskStatus.RUNNING: "#FFB900",
    TaskStatus.COMPLETE: "#107C10",
    TaskStatus.ERROR: "#E81123",
}


class TileList(QListWidget):
    """A grid-ish tile view. Order comes from the controllers, not from drag/drop."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setViewMode(QListWidget.IconMode)
        self.setMovement(QListWidget.Static)
        self.setResizeMode(QListWidget.Adjust)
        self.setUniformItemSizes(False)
        self.setGridSize(GRID_SIZE)
        self.setSpacing(10)
        self.setSelectionMode(QListWidget.SingleSelection)
        self.setContextMenuPolicy(Qt.CustomContextMenu)


class TaskList(QListWidget):
    """Background tasks, one row per task key."""

    def set_tasks(self, tasks: Iterable[BackgroundTask]) -> None:
        self.clear()
        for task in tasks:
            item = QListWidgetItem(f"{task.title}\n{task.message}")
            item.setData(Qt.UserRole, task.key)
            item.setForeground(QColor(TASK_COLORS[task.status]))
            self.addItem(item)

    def selected_key(self) -> str:
        item = self.currentItem()
        return item.data(Qt.UserRole) if item else ""
