#===============================================================================
#  Cellar_Cockpit | tile_widget.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Metro style tiles for bottles and apps, and the tile colour helper.
#  A tile shows a corner badge (PINNED / PRIORITY), a bold name and an
#  optional status line; empty parts are simply left out.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from PySide6.QtCore import Qt, QSize
from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout

from .constants import METRO_TILE_COLORS

DIM_WHITE = "rgba(255,255,255,0.85)"


def tile_color_for_key(key: str) -> str:
    """Stable palette colour for a bottle id or app path."""
    digest = hashlib.sha1(key.encode("utf-8")).digest()
    return METRO_TILE_COLORS[digest[0] % len(METRO_TILE_COLORS)]


@dataclass
class TileVisual:
    bg_color: str
    title: str
    subtitle: str = ""
    badge: str = ""


def _text(text: str, css: str, align, wrap: bool = True) -> QLabel:
    label = QLabel(text)
    label.setAlignment(align)
    label.setStyleSheet(css)
    label.setWordWrap(wrap)
    return label


class TileWidget(QFrame):
    def __init__(self, visual: TileVisual, size: QSize, parent=None):
        super().__init__(parent)
        self.setObjectName("CellarTile")
        self.setFixedSize(size)
        self.setStyleSheet(f"QFrame#CellarTile {{ background: {visual.bg_color}; }}")
        self.setToolTip(visual.title)

        col = QVBoxLayout(self)
        col.setContentsMargins(10, 8, 10, 8)
        col.setSpacing(4)

        if visual.badge:
            col.addWidget(_text(
                visual.badge,
                f"color: {DIM_WHITE}; font-size: 8pt; font-weight: bold;",
                Qt.AlignRight | Qt.AlignTop,
                wrap=False,
            ))
        col.addStretch(1)
        col.addWidget(_text(
            visual.title,
            'color: white; font-family: "Segoe UI"; font-size: 11pt; font-weight: bold;',
            Qt.AlignLeft | Qt.AlignBottom,
        ))
        if visual.subtitle.strip():
            col.addWidget(_text(
                visual.subtitle,
                f'color: {DIM_WHITE}; font-family: "Segoe UI"; font-size: 9pt;',
                Qt.AlignLeft | Qt.AlignBottom,
            ))
