#===============================================================================
#  Cellar_Cockpit | api.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Typed request surface of the backend. One method per backend operation;
#  every method is non-blocking and answers through on_done / on_error.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .models import Bottle, BottleTemplate, DetectedApp, RegisteredApp, WineRunner

logger = logging.getLogger(__name__)

Done = Callable[[Any], None]
Failed = Callable[[str], None]

# Command names on the backend boundary
CMD_LIST_BOTTLES = "get_bottles"
CMD_BOTTLE_DETAIL = "get_bottle_details"
CMD_CREATE_BOTTLE = "create_bottle"
CMD_DELETE_BOTTLE = "delete_bottle"
CMD_RENAME_BOTTLE = "rename_bottle"
CMD_SET_COVER = "set_bottle_cover"
CMD_SCAN_APPS = "scan_for_apps"
CMD_PIN_APP = "pin_app"
CMD_UNPIN_APP = "unpin_app"
CMD_SET_ENGINE = "set_bottle_engine"
CMD_RESET_ENGINE = "reset_bottle_engine"
CMD_INITIALIZE = "initialize_bottle"
CMD_INSTALL_TEMPLATE_DEP = "install_template_dependency"
CMD_RUN_EXECUTABLE = "run_executable"
CMD_LIST_RUNNERS = "get_wine_runners"
CMD_LIST_TEMPLATES = "get_bottle_templates"
CMD_ENGINE_STATUS = "check_engine_status"
CMD_DEPLOY_ENGINE = "download_engine"
CMD_REPAIR_GRAPHICS = "install_dx_runtime"
CMD_OPEN_BOTTLE_DIR = "open_bottle_dir"


def _ignore(_result: Any) -> None:
    return None


def _list_of(parse: Callable[[Dict[str, Any]], Any]) -> Callable[[Any], List[Any]]:
    def inner(raw: Any) -> List[Any]:
        return [parse(item) for item in (raw or [])]
    return inner


class CellarApi:
    def __init__(self, dispatcher):
        self._dispatcher = dispatcher

    def _call(
        self,
        command: str,
        args: Optional[Dict[str, Any]],
        on_done: Done,
        on_error: Failed,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        def success(raw: Any) -> None:
            if parse is None:
                on_done(raw)
                return
            try:
                value = parse(raw)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Malformed %s payload: %r", command, raw)
                on_error(f"Malformed response from {command}: {e}")
                return
            on_done(value)

        self._dispatcher.dispatch(command, args, success, on_error)

    # --- bottles ---
    def list_bottles(self, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_LIST_BOTTLES, None, on_done, on_error, _list_of(Bottle.from_dict))

    def get_bottle(self, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_BOTTLE_DETAIL, {"bottle_id": bottle_id}, on_done, on_error, Bottle.from_dict)

    def create_bottle(self, name: str, environment_type: str, on_done: Done, on_error: Failed) -> None:
        args = {"name": name, "environment_type": environment_type}
        self._call(CMD_CREATE_BOTTLE, args, on_done, on_error, Bottle.from_dict)

    def delete_bottle(self, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_DELETE_BOTTLE, {"bottle_id": bottle_id}, on_done, on_error, _ignore)

    def rename_bottle(self, bottle_id: str, new_name: str, on_done: Done, on_error: Failed) -> None:
        args = {"bottle_id": bottle_id, "new_name": new_name}
        self._call(CMD_RENAME_BOTTLE, args, on_done, on_error, _ignore)

    def set_bottle_cover(self, bottle_id: str, cover: str, on_done: Done, on_error: Failed) -> None:
        args = {"bottle_id": bottle_id, "cover": cover}
        self._call(CMD_SET_COVER, args, on_done, on_error, _ignore)

    def open_bottle_dir(self, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_OPEN_BOTTLE_DIR, {"bottle_id": bottle_id}, on_done, on_error, _ignore)

    # --- apps ---
    def scan_apps(self, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_SCAN_APPS, {"bottle_id": bottle_id}, on_done, on_error, _list_of(DetectedApp.from_dict))

    def pin_app(self, bottle_id: str, app: RegisteredApp, on_done: Done, on_error: Failed) -> None:
        args = {"bottle_id": bottle_id, "app": app.to_dict()}
        self._call(CMD_PIN_APP, args, on_done, on_error, _ignore)

    def unpin_app(self, bottle_id: str, path: str, on_done: Done, on_error: Failed) -> None:
        args = {"bottle_id": bottle_id, "path": path}
        self._call(CMD_UNPIN_APP, args, on_done, on_error, _ignore)

    def run_executable(self, path: str, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        args = {"path": path, "bottle_id": bottle_id}
        self._call(CMD_RUN_EXECUTABLE, args, on_done, on_error, _ignore)

    # --- engine ---
    def set_bottle_engine(self, bottle_id: str, engine_path: str, on_done: Done, on_error: Failed) -> None:
        args = {"bottle_id": bottle_id, "engine_path": engine_path}
        self._call(CMD_SET_ENGINE, args, on_done, on_error, _ignore)

    def reset_bottle_engine(self, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_RESET_ENGINE, {"bottle_id": bottle_id}, on_done, on_error, _ignore)

    def initialize_bottle(self, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_INITIALIZE, {"bottle_id": bottle_id}, on_done, on_error, _ignore)

    def install_template_dependency(self, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_INSTALL_TEMPLATE_DEP, {"bottle_id": bottle_id}, on_done, on_error, _ignore)

    def list_runners(self, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_LIST_RUNNERS, None, on_done, on_error, _list_of(WineRunner.from_dict))

    def list_templates(self, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_LIST_TEMPLATES, None, on_done, on_error, _list_of(BottleTemplate.from_dict))

    def check_engine(self, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_ENGINE_STATUS, None, on_done, on_error, bool)

    def deploy_engine(self, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_DEPLOY_ENGINE, None, on_done, on_error, _ignore)

    def repair_graphics(self, bottle_id: str, on_done: Done, on_error: Failed) -> None:
        self._call(CMD_REPAIR_GRAPHICS, {"bottle_id": bottle_id}, on_done, on_error, _ignore)
