"""
Capture-layer contract: one delegated handler at the root of the element tree.

The host converts native events into RawInteraction snapshots and calls
dispatch(). SmartListener attaches its single handler here once its
low-priority init task has run.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from smartswap.tracking.dom import RawInteraction

InteractionHandler = Callable[[RawInteraction], Any]


class CaptureSurface(Protocol):
    def attach(self, handler: InteractionHandler) -> Callable[[], None]: ...


class DelegatedCapture:
    def __init__(self) -> None:
        self._handlers: list[InteractionHandler] = []

    def attach(self, handler: InteractionHandler) -> Callable[[], None]:
        """Register handler; returns a detach callable (safe to call twice)."""
        self._handlers.append(handler)

        def detach() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return detach

    def dispatch(self, interaction: RawInteraction) -> None:
        for handler in list(self._handlers):
            handler(interaction)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)
