#===============================================================================
#  Cellar_Cockpit | models.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Shared data models: bottles, registered/detected apps, background tasks,
#  runner candidates and bottle templates. Payload dicts coming from the
#  backend are converted here and nowhere else.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .constants import ENV_CLASSIC, ENV_PRO, TEMPLATE_BUNDLED_SOFTWARE


class RunnerTier(str, Enum):
    STANDARD = "Standard"
    GPTK = "GPTK"
    WHISKY_GPTK = "WhiskyGPTK"


class TaskKind(str, Enum):
    ENGINE_DEPLOYMENT = "engine-deployment"
    REPAIR = "repair"
    GENERIC = "generic"


class TaskStatus(str, Enum):
    RUNNING = "running"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class RegisteredApp:
    """An app persisted in a bottle's registry (explicit user curation)."""
    path: str           # executable path, unique within a bottle
    name: str
    pinned: bool = False
    priority: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RegisteredApp":
        return RegisteredApp(
            path=str(d["path"]),
            name=str(d.get("name") or d["path"]),
            pinned=bool(d.get("pinned", False)),
            priority=bool(d.get("priority", False)),
        )


@dataclass(frozen=True)
class DetectedApp:
    """Result of one backend scan. Never persisted."""
    path: str
    name: str
    is_priority: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "DetectedApp":
        return DetectedApp(
            path=str(d["path"]),
            name=str(d.get("name") or d["path"]),
            is_priority=bool(d.get("is_priority", False)),
        )


@dataclass(frozen=True)
class Bottle:
    id: str
    name: str
    path: str
    created_at: int = 0
    environment: str = ENV_CLASSIC
    engine_path: Optional[str] = None
    cover: Optional[str] = None
    apps: Tuple[RegisteredApp, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["apps"] = [a.to_dict() for a in self.apps]
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Bottle":
        # Registry entries are unique by path; the first one wins.
        seen = set()
        apps: List[RegisteredApp] = []
        for raw in d.get("apps") or []:
            app = RegisteredApp.from_dict(raw)
            if app.path in seen:
                continue
            seen.add(app.path)
            apps.append(app)

        return Bottle(
            id=str(d["id"]),
            name=str(d.get("name") or d["id"]),
            path=str(d.get("path") or ""),
            created_at=int(d.get("created_at") or 0),
            environment=str(d.get("environment") or ENV_CLASSIC),
            engine_path=d.get("engine_path") or None,
            cover=d.get("cover") or None,
            apps=tuple(apps),
        )


@dataclass(frozen=True)
class WineRunner:
    """Engine candidate reported by runner detection."""
    runner_type: RunnerTier
    path: str
    version: str = ""
    supports_d3dmetal: bool = False
    supports_esync: bool = False

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "WineRunner":
        return WineRunner(
            runner_type=RunnerTier(d.get("runner_type") or RunnerTier.STANDARD.value),
            path=str(d["path"]),
            version=str(d.get("version") or ""),
            supports_d3dmetal=bool(d.get("supports_d3dmetal", False)),
            supports_esync=bool(d.get("supports_esync", False)),
        )


@dataclass(frozen=True)
class BottleTemplate:
    id: str
    name: str
    description: str = ""
    recommended_runner: Optional[RunnerTier] = None
    bundled_software: Optional[str] = None

    @property
    def environment_type(self) -> str:
        """Templates that bundle a launcher get the "pro" environment."""
        return ENV_PRO if self.bundled_software else ENV_CLASSIC

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "BottleTemplate":
        tid = str(d["id"])
        rec = d.get("recommended_runner")
        bundled = d.get("bundled_software", TEMPLATE_BUNDLED_SOFTWARE.get(tid))
        return BottleTemplate(
            id=tid,
            name=str(d.get("name") or tid),
            description=str(d.get("description") or ""),
            recommended_runner=RunnerTier(rec) if rec else None,
            bundled_software=bundled or None,
        )


@dataclass
class BackgroundTask:
    key: str
    title: str
    kind: TaskKind = TaskKind.GENERIC
    message: str = ""
    is_complete: bool = False
    has_error: bool = False

    @property
    def status(self) -> TaskStatus:
        if self.has_error:
            return TaskStatus.ERROR
        if self.is_complete:
            return TaskStatus.COMPLETE
        return TaskStatus.RUNNING

    @property
    def is_active(self) -> bool:
        return not (self.is_complete or self.has_error)

    def copy(self) -> "BackgroundTask":
        return replace(self)
