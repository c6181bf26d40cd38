from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest
from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@dataclass
class PendingCall:
    command: str
    args: Optional[Dict[str, Any]]
    on_success: Callable[[Any], None]
    on_failure: Callable[[str], None]
    settled: bool = False

    def resolve(self, value: Any = None) -> None:
        assert not self.settled, f"{self.command} already settled"
        self.settled = True
        self.on_success(value)

    def reject(self, message: str = "boom") -> None:
        assert not self.settled, f"{self.command} already settled"
        self.settled = True
        self.on_failure(message)


@dataclass
class ManualDispatcher:
    """Queues backend calls so a test decides when (and in which order) they settle.

    `responders` maps a command to a callable(args) returning the result; those
    calls are resolved immediately instead of being queued.
    """

    responders: Dict[str, Callable[[Optional[Dict[str, Any]]], Any]] = field(default_factory=dict)
    calls: List[PendingCall] = field(default_factory=list)

    def dispatch(self, command, args, on_success, on_failure) -> None:
        call = PendingCall(command, args, on_success, on_failure)
        self.calls.append(call)
        responder = self.responders.get(command)
        if responder is not None:
            call.resolve(responder(args))

    def pending(self, command: Optional[str] = None) -> List[PendingCall]:
        return [c for c in self.calls if not c.settled and (command is None or c.command == command)]

    def take(self, command: str) -> PendingCall:
        """Oldest unsettled call for `command`."""
        pending = self.pending(command)
        assert pending, f"no pending {command} call (seen: {[c.command for c in self.calls]})"
        return pending[0]

    def resolve(self, command: str, value: Any = None) -> PendingCall:
        call = self.take(command)
        call.resolve(value)
        return call

    def reject(self, command: str, message: str = "boom") -> PendingCall:
        call = self.take(command)
        call.reject(message)
        return call

    def commands(self) -> List[str]:
        return [c.command for c in self.calls]


@pytest.fixture
def dispatcher() -> ManualDispatcher:
    return ManualDispatcher()
