"""
Pluggable classification overrides.

A middleware receives the element descriptor and the raw interaction and
returns an Override or None ("no opinion"). Middlewares run in registration
order and the first Override wins:

    chain = MiddlewareChain()
    chain.use(newsletter_detector).use(video_detector)
    override = chain.run(descriptor, interaction)

Middlewares must be synchronous. One that raises is logged and treated as
"no opinion" so interaction handling never raises.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from smartswap.observability.logging import get_logger
from smartswap.observability.structured import EventType, get_structured_logger
from smartswap.observability.telemetry import counter
from smartswap.tracking.dom import RawInteraction
from smartswap.tracking.models import ElementDescriptor, SmartEventType

logger = get_logger(__name__)


@dataclass(frozen=True)
class Override:
    event_type: SmartEventType
    label: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def middleware_data(self) -> dict[str, Any]:
        """Label plus custom data, as stored on the EventRecord."""
        merged: dict[str, Any] = {}
        if self.label:
            merged["label"] = self.label
        merged.update(self.data)
        return merged


Middleware = Callable[[ElementDescriptor, RawInteraction], Override | None]


class MiddlewareChain:
    def __init__(self) -> None:
        self._middlewares: list[Middleware] = []

    def use(self, middleware: Middleware) -> MiddlewareChain:
        self._middlewares.append(middleware)
        return self

    def clear(self) -> None:
        self._middlewares.clear()

    def __len__(self) -> int:
        return len(self._middlewares)

    def run(self, descriptor: ElementDescriptor, interaction: RawInteraction) -> Override | None:
        for middleware in self._middlewares:
            try:
                result = middleware(descriptor, interaction)
            except Exception as e:
                name = getattr(middleware, "__name__", type(middleware).__name__)
                logger.warning("Middleware %s failed: %s", name, e)
                counter("tracking.middleware_errors")
                get_structured_logger().log_event(
                    EventType.MIDDLEWARE_ERROR, middleware=name, error=type(e).__name__
                )
                continue
            if result is not None:
                counter("tracking.middleware_overrides")
                return result
        return None
