"""
SmartListener: classify -> middleware -> friction -> EventRecord -> ledger.

Two-phase init keeps listener setup off the critical path:

    listener = SmartListener(capture=capture, scheduler=scheduler, ledger=ledger)
    listener.init()        # schedules a low-priority attach task (cancellable)
    ...                    # task fires: one handler attached to the capture surface
    listener.destroy()     # cancels a pending attach or detaches; idempotent

Once attached, handle_interaction() runs synchronously per interaction and
never raises.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from smartswap.config import (
    FRUSTRATION_THRESHOLD,
    FRUSTRATION_WINDOW_MS,
    LISTENER_EVENT_HISTORY,
    LISTENER_INIT_TIMEOUT_MS,
)
from smartswap.intent.categories import FunnelStage
from smartswap.observability.logging import get_logger
from smartswap.observability.structured import EventType, get_structured_logger
from smartswap.observability.telemetry import counter
from smartswap.tracking.capture import CaptureSurface
from smartswap.tracking.classifier import ElementClassifier
from smartswap.tracking.dom import RawInteraction
from smartswap.tracking.frustration import Clock, FrustrationDetector, element_key, wall_clock_ms
from smartswap.tracking.ledger import EventLedger
from smartswap.tracking.middleware import Middleware, MiddlewareChain
from smartswap.tracking.models import EventRecord, SmartEventType, generate_id
from smartswap.tracking.scheduling import Handle, Scheduler

logger = get_logger(__name__)

EventCallback = Callable[[EventRecord], None]


@dataclass(frozen=True)
class ListenerConfig:
    variant_id: str = "default"
    funnel_stage: FunnelStage = FunnelStage.EXPLORE
    enable_frustration_detection: bool = True
    frustration_threshold: int = FRUSTRATION_THRESHOLD
    frustration_window_ms: int = FRUSTRATION_WINDOW_MS
    init_timeout_ms: int = LISTENER_INIT_TIMEOUT_MS
    history_limit: int = LISTENER_EVENT_HISTORY


@dataclass(frozen=True)
class ListenerMetrics:
    session_id: str
    event_count: int
    session_score: float
    is_initialized: bool
    middleware_count: int
    frustration_buffer_size: int


class SmartListener:
    def __init__(
        self,
        config: ListenerConfig | None = None,
        capture: CaptureSurface | None = None,
        scheduler: Scheduler | None = None,
        ledger: EventLedger | None = None,
        classifier: ElementClassifier | None = None,
        clock: Clock = wall_clock_ms,
        on_event: EventCallback | None = None,
        on_frustration: EventCallback | None = None,
    ):
        self.config = config or ListenerConfig()
        self._capture = capture
        self._scheduler = scheduler
        self._ledger = ledger
        self._classifier = classifier or ElementClassifier()
        self._clock = clock
        self._on_event = on_event
        self._on_frustration = on_frustration

        self._middleware = MiddlewareChain()
        self._detector = FrustrationDetector(
            threshold=self.config.frustration_threshold,
            window_ms=self.config.frustration_window_ms,
            clock=clock,
        )
        self.session_id = generate_id("pv", clock(), suffix_len=6)
        self._session_score = 0.0
        self._event_count = 0
        self._events: deque[EventRecord] = deque(maxlen=self.config.history_limit)

        self._init_handle: Handle | None = None
        self._detach: Callable[[], None] | None = None
        self._initialized = False
        self._destroyed = False

    # ------------------------------------------------------------------
    # Setup / teardown
    # ------------------------------------------------------------------

    def use(self, middleware: Middleware) -> SmartListener:
        """Register a classification override; chainable."""
        self._middleware.use(middleware)
        return self

    def init(self) -> None:
        """Phase one: schedule the attach task. No-op if pending or attached."""
        if self._destroyed or self._initialized or self._init_handle is not None:
            return
        if self._scheduler is None:
            self._attach()
            return
        self._init_handle = self._scheduler.call_when_idle(self._attach, self.config.init_timeout_ms)

    def _attach(self) -> None:
        """Phase two: attach one handler to the capture surface."""
        self._init_handle = None
        if self._destroyed or self._initialized:
            return
        if self._capture is not None:
            self._detach = self._capture.attach(self.handle_interaction)
        self._initialized = True
        get_structured_logger().log_event(
            EventType.LISTENER_ATTACHED, session_id=self.session_id, variant=self.config.variant_id
        )

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        if self._init_handle is not None:
            self._init_handle.cancel()
            self._init_handle = None
        if self._detach is not None:
            self._detach()
            self._detach = None
        self._detector.clear()
        self._middleware.clear()
        self._initialized = False

    # ------------------------------------------------------------------
    # Interaction path
    # ------------------------------------------------------------------

    def handle_interaction(self, interaction: RawInteraction) -> EventRecord | None:
        """Turn one raw interaction into an EventRecord, or None for no event."""
        if self._destroyed:
            return None

        classification = self._classifier.classify(interaction.target)
        if classification is None:
            return None

        event_type = classification.event_type
        middleware_data: dict[str, Any] = {}
        override = self._middleware.run(classification.descriptor, interaction)
        if override is not None:
            event_type = override.event_type
            middleware_data = override.middleware_data()
            get_structured_logger().log_event(
                EventType.MIDDLEWARE_OVERRIDE, session_id=self.session_id, event_type=event_type.value
            )

        is_friction = False
        if self.config.enable_frustration_detection:
            key = element_key(classification.element)
            is_friction = self._detector.record(key)
            if is_friction:
                event_type = SmartEventType.UX_FRICTION
                counter("tracking.friction_detected")
                get_structured_logger().friction_detected(self.session_id, key, interaction.path)

        self._session_score = round(min(1.0, self._session_score + classification.score.total / 100), 3)
        self._event_count += 1

        now = self._clock()
        record = EventRecord(
            id=generate_id("evt", now),
            type=event_type,
            variant_id=self.config.variant_id,
            cumulative_session_score=self._session_score,
            path=interaction.path,
            is_friction=is_friction,
            timestamp=datetime.fromtimestamp(now / 1000, UTC),
            session_id=self.session_id,
            semantic_score=classification.score,
            element_descriptor=classification.descriptor,
            middleware_data=middleware_data,
        )

        self._events.append(record)
        counter(f"tracking.events.{event_type.value}")
        get_structured_logger().log_event(
            EventType.INTERACTION_CLASSIFIED,
            session_id=self.session_id,
            event_type=event_type.value,
            total=classification.score.total,
            path=interaction.path,
        )
        if self._ledger is not None:
            self._ledger.push(record)

        self._notify(self._on_event, record)
        if is_friction:
            self._notify(self._on_frustration, record)
        return record

    def _notify(self, callback: EventCallback | None, record: EventRecord) -> None:
        if callback is None:
            return
        try:
            callback(record)
        except Exception as e:
            logger.warning("Listener callback failed for %s: %s", record.id, e)
            counter("tracking.callback_errors")

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def events(self) -> list[EventRecord]:
        return list(self._events)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def metrics(self) -> ListenerMetrics:
        return ListenerMetrics(
            session_id=self.session_id,
            event_count=self._event_count,
            session_score=self._session_score,
            is_initialized=self._initialized,
            middleware_count=len(self._middleware),
            frustration_buffer_size=self._detector.size,
        )
