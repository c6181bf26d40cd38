#===============================================================================
#  Cellar_Cockpit | constants.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Central place for titles, file naming, backend channel names, task keys,
#  view tabs and the template conventions shared by the controllers.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from PySide6.QtCore import QSize

APP_TITLE = "Cellar Cockpit"
STATE_FILE_NAME = "cellar_state.json"
LOG_DIR_NAME = ".cellar/logs"
ACTIVITY_LOG_FILE_NAME = "activity.log"
APP_LOG_FILE_NAME = "cellar.log"

DEFAULT_BACKEND_URL = "http://127.0.0.1:7878"
BACKEND_URL_ENV = "CELLAR_BACKEND_URL"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_EVENT_POLL_INTERVAL = 1.0

# --- Push-event channels ---
CHANNEL_STATUS_UPDATE = "status-update"
CHANNEL_ENGINE_STATUS = "engine-status"
CHANNEL_LIBRARY_CHANGED = "library-changed"

# --- Background task keys ---
TASK_ENGINE_SETUP = "engine-setup"
TASK_REPAIR = "repair-task"

TASK_TITLES = {
    TASK_ENGINE_SETUP: "Engine Deployment",
    TASK_REPAIR: "DirectX Repair",
}
GENERIC_TASK_TITLE = "Background Task"

# Substring heuristics for plain status strings (compared lower-cased)
COMPLETE_MARKERS = ("success", "complete", "installed")
ERROR_MARKERS = ("error", "failed")

# --- Bottle detail view tabs ---
TAB_APPS = "apps"
TAB_ENGINE = "engine"
TAB_ACTIVITY = "activity"
VIEW_TABS = (TAB_APPS, TAB_ENGINE, TAB_ACTIVITY)
DEFAULT_TAB = TAB_APPS

# --- Environment classification ---
ENV_PRO = "pro"
ENV_CLASSIC = "classic"

# Templates that ship a bundled launcher (template id -> software label).
# Backends may override this per template.
TEMPLATE_BUNDLED_SOFTWARE = {
    "steam_gaming": "Steam",
}

# --- Metro style theme (presentation only) ---
METRO_BG = "#101010"

METRO_TILE_COLORS = [
    "#0078D7",  # blue
    "#00B294",  # teal
    "#E81123",  # red
    "#FFB900",  # yellow
    "#8764B8",  # purple
    "#2D7D9A",  # steel
    "#107C10",  # green
    "#5C2D91",  # deep purple
]
PINNED_TILE_COLOR = "#107C10"

# Tile sizes (approximate Windows Phone "small" and "wide")
TILE_SMALL = QSize(150, 110)
TILE_WIDE = QSize(300, 110)
GRID_SIZE = TILE_WIDE
