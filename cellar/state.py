#===============================================================================
#  Cellar_Cockpit | state.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Load/save of persistent cockpit settings (backend address, timeouts,
#  last opened bottle, log folder).
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Iterable, Optional

from .constants import (
    BACKEND_URL_ENV,
    DEFAULT_BACKEND_URL,
    DEFAULT_EVENT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    LOG_DIR_NAME,
)

logger = logging.getLogger(__name__)


def default_state() -> Dict[str, Any]:
    return {
        "backend_url": "",                  # empty -> env var / built-in default
        "request_timeout": DEFAULT_REQUEST_TIMEOUT,
        "event_poll_interval": DEFAULT_EVENT_POLL_INTERVAL,
        "last_bottle_id": "",
        "log_dir": LOG_DIR_NAME,            # relative to the base dir
    }


def load_state(state_path: Path) -> Dict[str, Any]:
    """Load state from disk (or create defaults)."""
    d = default_state()
    if not state_path.exists():
        return d
    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Unreadable state file %s (%s); using defaults", state_path, e)
        return d
    if not isinstance(data, dict):
        return d
    for k in d:
        if k not in data:
            data[k] = d[k]
    return data


def save_state(state_path: Path, state: Dict[str, Any]) -> None:
    """Persist state to disk."""
    state_path.write_text(json.dumps(state, indent=2), encoding="utf-8")


def resolve_backend_url(state: Optional[Dict[str, Any]]) -> str:
    """Return the backend base URL.

    Resolution order:
      1) CELLAR_BACKEND_URL environment variable
      2) state['backend_url'] if set
      3) built-in default (local backend)
    """
    env = (os.environ.get(BACKEND_URL_ENV) or "").strip()
    if env:
        return env.rstrip("/")
    configured = str((state or {}).get("backend_url") or "").strip()
    if configured:
        return configured.rstrip("/")
    return DEFAULT_BACKEND_URL


def resolve_log_dir(base_dir: Path, state: Optional[Dict[str, Any]]) -> Path:
    raw = str((state or {}).get("log_dir") or LOG_DIR_NAME)
    p = Path(raw)
    return p if p.is_absolute() else base_dir / p


def float_setting(state: Optional[Dict[str, Any]], key: str, fallback: float) -> float:
    try:
        value = float((state or {}).get(key, fallback))
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def prune_last_bottle(state: Dict[str, Any], existing_ids: Iterable[str]) -> None:
    """Forget the remembered bottle when it no longer exists."""
    if state.get("last_bottle_id") and state["last_bottle_id"] not in set(existing_ids):
        state["last_bottle_id"] = ""
