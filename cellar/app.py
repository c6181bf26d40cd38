#===============================================================================
#  Cellar_Cockpit | app.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Application entry: logging, settings, controllers, main window.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from .constants import APP_LOG_FILE_NAME, APP_TITLE, STATE_FILE_NAME
from .context import build_http_context
from .main_window import MainWindow
from .state import load_state, resolve_log_dir, save_state

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"


def base_dir() -> Path:
    return Path(__file__).resolve().parent.parent


def setup_logging(log_dir: Path, level: int = logging.INFO) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / APP_LOG_FILE_NAME, encoding="utf-8")
    except OSError as e:
        logger.warning("File logging disabled (%s)", e)
        return
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)


def run() -> int:
    home = base_dir()
    state_path = home / STATE_FILE_NAME
    state = load_state(state_path)
    setup_logging(resolve_log_dir(home, state))

    app = QApplication.instance() or QApplication(sys.argv)
    ctx = build_http_context(home, state)
    logger.info("Starting %s", APP_TITLE)

    w = MainWindow(ctx, state_path, state)
    w.show()

    if ctx.poller is not None:
        ctx.poller.start()
    ctx.session.start()

    try:
        code = app.exec()
    finally:
        ctx.shutdown()
        save_state(state_path, state)
    return code
