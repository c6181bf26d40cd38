#===============================================================================
#  Cellar_Cockpit | activity_log.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Append-only, timestamped activity log. This is the one place where
#  failed backend calls are reported to the user.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class ActivityLog(QObject):
    entry_added = Signal(str)
    cleared = Signal()

    def __init__(
        self,
        log_file: Optional[Path] = None,
        clock: Callable[[], datetime] = datetime.now,
        parent=None,
    ):
        super().__init__(parent)
        self._log_file = Path(log_file) if log_file else None
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: List[str] = []

    def add(self, message: str) -> str:
        """Append a line and return it as stored ("[HH:MM:SS] message")."""
        line = f"[{self._clock().strftime('%H:%M:%S')}] {message}"
        with self._lock:
            self._entries.append(line)
        logger.info("%s", message)
        self._append_to_file(line)
        self.entry_added.emit(line)
        return line

    def entries(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        """Clear the visible entries. The log file is never truncated."""
        with self._lock:
            self._entries.clear()
        self.cleared.emit()

    def _append_to_file(self, line: str) -> None:
        if not self._log_file:
            return
        try:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._log_file, "a", encoding="utf-8", errors="ignore") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.warning("Could not write activity log %s: %s", self._log_file, e)
