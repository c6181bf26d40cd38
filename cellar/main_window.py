#===============================================================================
#  Cellar_Cockpit | main_window.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Main Metro/Windows-Phone style UI for the cellar:
#    - Bottle tiles (double click opens the bottle)
#    - Bottle detail: Apps / Engine / Activity tabs
#         * Apps: pinned & priority tiles, then everything else detected
#         * Right-click on an app: run, pin, unpin
#    - Background task panel (engine deployment, DirectX repair)
#    - New Bottle wizard, engine deployment, rename/delete/cover, open folder,
#      pin a hand-picked .exe
#
#  The window only renders controller state and forwards user intent; all
#  ordering and staleness rules live in the controllers.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QListWidgetItem,
    QMainWindow,
    QMenu,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QStackedWidget,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from .constants import (
    APP_TITLE,
    ENV_PRO,
    METRO_BG,
    PINNED_TILE_COLOR,
    TAB_ACTIVITY,
    TAB_APPS,
    TAB_ENGINE,
    TILE_SMALL,
    TILE_WIDE,
    VIEW_TABS,
)
from .context import CellarContext
from .errors import PreconditionError
from .models import WineRunner
from .reconciler import LibraryEntry
from .runners import default_runner, describe_runner, find_runner
from .state import save_state
from .tile_widget import TileVisual, TileWidget, tile_color_for_key
from .ui_widgets import TaskList, TileList
from .wizard_dialog import NewBottleDialog

logger = logging.getLogger(__name__)

TAB_LABELS = {
    TAB_APPS: "Apps",
    TAB_ENGINE: "Engine",
    TAB_ACTIVITY: "Activity",
}


class MainWindow(QMainWindow):
    def __init__(self, ctx: CellarContext, state_path: Path, state: Dict[str, Any]):
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(1100, 720)

        self.ctx = ctx
        self.session = ctx.session
        self.state_path = state_path
        self.state = state
        self._runners: List[WineRunner] = []

        self.setStyleSheet(f"""
        QMainWindow {{ background: {METRO_BG}; }}
        QLabel {{ color: white; font-family: "Segoe UI"; }}
        QToolButton, QPushButton {{
            font-family: "Segoe UI";
            color: white;
            background: #1a1a1a;
            border: 1px solid #2a2a2a;
            padding: 6px 10px;
        }}
        QToolButton:hover, QPushButton:hover {{ background: #222; }}
        QToolButton:pressed, QPushButton:pressed {{ background: #2a2a2a; }}
        QPlainTextEdit, QListWidget {{ background: #141414; color: white; border: 1px solid #2a2a2a; }}
        """)

        root = QWidget()
        self.setCentralWidget(root)
        layout = QVBoxLayout(root)
        layout.setContentsMargins(14, 14, 14, 14)
        layout.setSpacing(10)

        header = QHBoxLayout()
        header.addWidget(QLabel(f"<b>{APP_TITLE}</b>"))
        self.engine_label = QLabel("Engine: checking…")
        header.addWidget(self.engine_label)
        header.addStretch(1)

        self.btn_new_bottle = QPushButton("New Bottle")
        self.btn_new_bottle.clicked.connect(self.new_bottle)
        header.addWidget(self.btn_new_bottle)

        self.btn_deploy = QPushButton("Deploy Engine")
        self.btn_deploy.clicked.connect(self.session.deploy_engine)
        header.addWidget(self.btn_deploy)

        self.btn_refresh = QPushButton("Refresh")
        self.btn_refresh.clicked.connect(self.refresh)
        header.addWidget(self.btn_refresh)

        layout.addLayout(header)

        self.stack = QStackedWidget()
        self.stack.addWidget(self._build_bottles_page())
        self.stack.addWidget(self._build_detail_page())

        splitter = QSplitter(Qt.Horizontal)
        splitter.addWidget(self.stack)
        splitter.addWidget(self._build_tasks_panel())
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter)

        self.session.bottles_changed.connect(self.rebuild_bottles)
        self.session.selection_changed.connect(self._on_selection_changed)
        self.session.bottle_changed.connect(self._show_bottle_header)
        self.session.apps_changed.connect(self.rebuild_apps)
        self.session.tab_changed.connect(self._on_tab_changed)
        self.session.engine_ready_changed.connect(self._on_engine_ready)
        self.ctx.tasks.changed.connect(self.rebuild_tasks)
        self.ctx.activity.entry_added.connect(self.activity_view.appendPlainText)
        self.ctx.activity.cleared.connect(self.activity_view.clear)

        for line in self.ctx.activity.entries():
            self.activity_view.appendPlainText(line)

    # ----------------------------
    # Layout
    # ----------------------------
    def _build_bottles_page(self) -> QWidget:
        page = QWidget()
        v = QVBoxLayout(page)
        v.setContentsMargins(0, 0, 0, 0)
        v.addWidget(QLabel("Bottles"))

        self.bottle_list = TileList()
        self.bottle_list.itemDoubleClicked.connect(self.open_bottle_item)
        self.bottle_list.customContextMenuRequested.connect(self.open_bottle_menu)
        v.addWidget(self.bottle_list)
        return page

    def _build_detail_page(self) -> QWidget:
        page = QWidget()
        v = QVBoxLayout(page)
        v.setContentsMargins(0, 0, 0, 0)

        top = QHBoxLayout()
        self.btn_back = QPushButton("← Bottles")
        self.btn_back.clicked.connect(self.session.deselect)
        top.addWidget(self.btn_back)
        self.bottle_title = QLabel("")
        top.addWidget(self.bottle_title)
        top.addStretch(1)

        for text, slot in (
            ("Rescan", self.rescan),
            ("Files", self.open_files),
            ("Run .exe…", self.run_exe),
            ("Pin .exe…", self.pin_exe),
            ("Fix Graphics", self.repair_graphics),
            ("Rename…", self.rename_bottle),
            ("Cover…", self.change_cover),
            ("Delete…", self.delete_bottle),
        ):
            btn = QPushButton(text)
            btn.clicked.connect(slot)
            top.addWidget(btn)
        v.addLayout(top)

        self.tabs = QTabWidget()
        self.tabs.addTab(self._build_apps_tab(), TAB_LABELS[TAB_APPS])
        self.tabs.addTab(self._build_engine_tab(), TAB_LABELS[TAB_ENGINE])
        self.tabs.addTab(self._build_activity_tab(), TAB_LABELS[TAB_ACTIVITY])
        self.tabs.currentChanged.connect(self._tab_clicked)
        v.addWidget(self.tabs)
        return page

    def _build_apps_tab(self) -> QWidget:
        tab = QWidget()
        v = QVBoxLayout(tab)

        self.scan_label = QLabel("")
        v.addWidget(self.scan_label)

        v.addWidget(QLabel("Pinned & Priority"))
        self.priority_list = TileList()
        self.priority_list.itemDoubleClicked.connect(self.run_app_item)
        self.priority_list.customContextMenuRequested.connect(lambda pos: self.open_app_menu(self.priority_list, pos))

        v.addWidget(self.priority_list, 1)

        v.addWidget(QLabel("Detected"))
        self.secondary_list = TileList()
        self.secondary_list.itemDoubleClicked.connect(self.run_app_item)
        self.secondary_list.customContextMenuRequested.connect(lambda pos: self.open_app_menu(self.secondary_list, pos))
        v.addWidget(self.secondary_list, 2)
        return tab

    def _build_engine_tab(self) -> QWidget:
        tab = QWidget()
        v = QVBoxLayout(tab)

        self.engine_path_label = QLabel("")
        self.engine_path_label.setWordWrap(True)
        v.addWidget(self.engine_path_label)

        row = QHBoxLayout()
        self.runner_combo = QComboBox()
        row.addWidget(self.runner_combo, 1)
        btn_apply = QPushButton("Use Engine")
        btn_apply.clicked.connect(self.apply_engine)
        row.addWidget(btn_apply)
        btn_reset = QPushButton("Reset to Default")
        btn_reset.clicked.connect(self.reset_engine)
        row.addWidget(btn_reset)
        v.addLayout(row)
        v.addStretch(1)
        return tab

    def _build_activity_tab(self) -> QWidget:
        tab = QWidget()
        v = QVBoxLayout(tab)
        self.activity_view = QPlainTextEdit()
        self.activity_view.setReadOnly(True)
        v.addWidget(self.activity_view)

        row = QHBoxLayout()
        row.addStretch(1)
        btn_clear = QPushButton("Clear")
        btn_clear.clicked.connect(self.ctx.activity.clear)
        row.addWidget(btn_clear)
        v.addLayout(row)
        return tab

    def _build_tasks_panel(self) -> QWidget:
        panel = QWidget()
        v = QVBoxLayout(panel)
        v.setContentsMargins(0, 0, 0, 0)
        v.addWidget(QLabel("Background Tasks"))

        self.task_list = TaskList()
        v.addWidget(self.task_list)

        btn_dismiss = QPushButton("Dismiss")
        btn_dismiss.clicked.connect(self.dismiss_task)
        v.addWidget(btn_dismiss)
        return panel

    # ----------------------------
    # Rebuild from controller state
    # ----------------------------
    def refresh(self):
        self.session.load_bottles()
        self.session.check_engine()
        self.session.refresh()

    def rebuild_bottles(self):
        self.bottle_list.clear()
        for b in self.session.bottles:
            subtitle = "Pro" if b.environment == ENV_PRO else "Classic"
            if b.engine_path:
                subtitle += " • custom engine"
            self._add_tile(
                self.bottle_list,
                b.id,
                TileVisual(bg_color=tile_color_for_key(b.id), title=b.name, subtitle=subtitle),
                TILE_WIDE,
            )

    def rebuild_apps(self):
        views = self.session.views
        self.priority_list.clear()
        self.secondary_list.clear()

        for entry in views.priority:
            self._add_tile(self.priority_list, entry.path, self._app_visual(entry), TILE_WIDE)
        for entry in views.secondary:
            self._add_tile(self.secondary_list, entry.path, self._app_visual(entry), TILE_SMALL)

        lib = self.session.library
        if lib is None:
            self.scan_label.setText("")
        elif lib.last_scan_error:
            self.scan_label.setText(f"Last scan failed: {lib.last_scan_error}")
        else:
            self.scan_label.setText(f"{len(views.entries())} apps")

    def rebuild_tasks(self):
        self.task_list.set_tasks(self.ctx.tasks.tasks())

    def _app_visual(self, entry: LibraryEntry) -> TileVisual:
        badge = "PINNED" if entry.pinned else ("PRIORITY" if entry.priority else "")
        color = PINNED_TILE_COLOR if entry.pinned else tile_color_for_key(entry.path)
        subtitle = "" if entry.detected else "Not found in last scan"
        return TileVisual(bg_color=color, title=entry.name, subtitle=subtitle, badge=badge)

    def _add_tile(self, list_widget: TileList, key: str, visual: TileVisual, size):
        item = QListWidgetItem()
        item.setData(Qt.UserRole, key)
        item.setSizeHint(size)
        list_widget.addItem(item)
        list_widget.setItemWidget(item, TileWidget(visual, size=size))

    # ----------------------------
    # Session signals
    # ----------------------------
    def _on_selection_changed(self, bottle_id: str):
        if not bottle_id:
            self.stack.setCurrentIndex(0)
            self.bottle_title.setText("")
            return
        self.stack.setCurrentIndex(1)
        self._show_bottle_header()
        self._load_runners()

    def _show_bottle_header(self):
        b = self.session.current_bottle
        if b is None:
            return
        self.bottle_title.setText(f"<b>{b.name}</b>")
        self.engine_path_label.setText(f"Engine: {b.engine_path or 'default'}")
        self._select_runner_in_combo()

    def _on_tab_changed(self, tab: str):
        idx = VIEW_TABS.index(tab)
        if self.tabs.currentIndex() != idx:
            self.tabs.setCurrentIndex(idx)

    def _tab_clicked(self, index: int):
        if 0 <= index < len(VIEW_TABS):
            self.session.set_active_tab(VIEW_TABS[index])

    def _on_engine_ready(self, ready: bool):
        self.engine_label.setText("Engine: ready" if ready else "Engine: not installed")
        self.btn_deploy.setEnabled(not ready)

    # ----------------------------
    # Engine tab
    # ----------------------------
    def _load_runners(self):
        def done(runners: List[WineRunner]):
            self._runners = list(runners)
            self.runner_combo.clear()
            for r in self._runners:
                self.runner_combo.addItem(describe_runner(r), r.path)
            self._select_runner_in_combo()

        self.ctx.api.list_runners(done, lambda msg: self.ctx.activity.add(f"Error loading runners: {msg}"))

    def _select_runner_in_combo(self):
        b = self.session.current_bottle
        if b is None or not self._runners:
            return
        current = find_runner(self._runners, b.engine_path or "") or default_runner(self._runners)
        if current is not None:
            self.runner_combo.setCurrentIndex(self._runners.index(current))

    def apply_engine(self):
        bottle_id = self.session.selected_id
        path = self.runner_combo.currentData()
        if bottle_id and path:
            self.session.set_engine(bottle_id, path)

    def reset_engine(self):
        if self.session.selected_id:
            self.session.reset_engine(self.session.selected_id)

    # ----------------------------
    # Actions
    # ----------------------------
    def new_bottle(self):
        dlg = NewBottleDialog(self.ctx.new_workflow(), self)
        dlg.exec()

    def open_bottle_item(self, item: QListWidgetItem):
        self._guarded(self.session.select, item.data(Qt.UserRole))

    def open_bottle_menu(self, pos):
        item = self.bottle_list.itemAt(pos)
        if not item:
            return
        bottle_id = item.data(Qt.UserRole)

        menu = QMenu(self)
        act_open = QAction("Open", self)
        act_delete = QAction("Delete…", self)
        menu.addAction(act_open)
        menu.addSeparator()
        menu.addAction(act_delete)

        chosen = menu.exec(self.bottle_list.mapToGlobal(pos))
        if chosen == act_open:
            self._guarded(self.session.select, bottle_id)
        elif chosen == act_delete:
            self._confirm_delete(bottle_id)

    def rescan(self):
        self._guarded(self.session.rescan)

    def run_exe(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Run executable in bottle",
            str(Path.home()),
            "Windows programs (*.exe *.msi *.bat)",
        )
        if file_path:
            self._guarded(self.session.run_executable, file_path)

    def pin_exe(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Pin executable as shortcut",
            str(Path.home()),
            "Windows programs (*.exe)",
        )
        if file_path:
            self._guarded(self.session.pin_shortcut, file_path)

    def open_files(self):
        self._guarded(self.session.open_bottle_dir)

    def repair_graphics(self):
        self._guarded(self.session.repair_graphics)

    def rename_bottle(self):
        b = self.session.current_bottle
        if b is None:
            return
        text, ok = QInputDialog.getText(self, "Rename bottle", "Name:", text=b.name)
        if ok:
            self._guarded(self.session.rename_bottle, b.id, text)

    def change_cover(self):
        b = self.session.current_bottle
        if b is None:
            return
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Choose cover image",
            str(Path.home()),
            "Images (*.png *.jpg *.jpeg *.bmp *.webp)",
        )
        if file_path:
            self.session.set_cover(b.id, file_path)

    def delete_bottle(self):
        if self.session.selected_id:
            self._confirm_delete(self.session.selected_id)

    def _confirm_delete(self, bottle_id: str):
        b = self.session.bottle(bottle_id)
        name = b.name if b else bottle_id
        resp = QMessageBox.question(
            self,
            "Delete bottle",
            f"Delete '{name}' and everything installed in it?\n\nThis cannot be undone.",
        )
        if resp == QMessageBox.Yes:
            self.session.delete_bottle(bottle_id)

    def run_app_item(self, item: QListWidgetItem):
        self._guarded(self.session.run_executable, item.data(Qt.UserRole))

    def open_app_menu(self, which_list: TileList, pos):
        item = which_list.itemAt(pos)
        if not item:
            return
        entry = self.session.views.find(item.data(Qt.UserRole))
        if entry is None:
            return

        menu = QMenu(self)
        act_run = QAction("Run", self)
        act_pin = QAction("Unpin" if entry.pinned else "Pin", self)
        menu.addAction(act_run)
        menu.addSeparator()
        menu.addAction(act_pin)

        chosen = menu.exec(which_list.mapToGlobal(pos))
        if chosen == act_run:
            self._guarded(self.session.run_executable, entry.path)
        elif chosen == act_pin:
            if entry.pinned:
                self._guarded(self.session.unpin, entry.path)
            else:
                self._guarded(self.session.pin, entry)

    def dismiss_task(self):
        key = self.task_list.selected_key()
        if not key:
            return
        if not self.ctx.tasks.try_dismiss(key):
            QMessageBox.information(self, "Task running", "A running task cannot be dismissed.")

    def _guarded(self, fn, *args):
        try:
            fn(*args)
        except PreconditionError as e:
            QMessageBox.warning(self, APP_TITLE, str(e))

    # ----------------------------
    # Close
    # ----------------------------
    def closeEvent(self, event):
        logger.info("Saving state to %s", self.state_path)
        save_state(self.state_path, self.state)
        super().closeEvent(event)
