"""
Structured Logging Kit for SmartSwap

Provides one-line JSON event logging with:
- Correlation IDs (visitor session_id, hashed)
- Event taxonomy across the intent, tracking and ledger handoffs
- Sampling & rate limits (10% info, 100% error/critical)
- Path redaction (query strings can carry campaign identifiers)

Usage:
    from smartswap.observability.structured import StructuredLogger, EventType

    slog = StructuredLogger(run_id="20261018_101500")

    slog.log_event(
        EventType.LEDGER_BATCH_FLUSHED,
        session_id="pv_m1x2_abc123",
        trigger="batch_full",
        event_count=20,
    )

Output:
    {"ts":"2026-10-18T10:15:00.123+00:00","level":"INFO","run":"20261018_101500","session":"3f9a...","event":"ledger_batch_flushed","trigger":"batch_full","event_count":20}
"""

from __future__ import annotations

import hmac
import json
import logging
import random
import secrets
import threading
from datetime import UTC, date, datetime, timedelta
from enum import Enum
from typing import Any

logger = logging.getLogger("smartswap.structured")


class EventType(str, Enum):
    """Event taxonomy covering the pipeline handoffs"""

    # 1. Intent resolution
    SIGNALS_COLLECTED = "signals_collected"
    INTENT_RESOLVED = "intent_resolved"
    INTENT_FALLBACK = "intent_fallback"
    DECISION_COMPOSED = "decision_composed"

    # 2. Interaction tracking
    INTERACTION_CLASSIFIED = "interaction_classified"
    FRICTION_DETECTED = "friction_detected"
    MIDDLEWARE_OVERRIDE = "middleware_override"
    MIDDLEWARE_ERROR = "middleware_error"
    LISTENER_ATTACHED = "listener_attached"

    # 3. Event ledger
    LEDGER_DUPLICATE_DROPPED = "ledger_duplicate_dropped"
    LEDGER_BATCH_FLUSHED = "ledger_batch_flushed"
    LEDGER_PERSIST_ERROR = "ledger_persist_error"
    LEDGER_RESTORE_OK = "ledger_restore_ok"
    LEDGER_RESTORE_ERROR = "ledger_restore_error"
    LEDGER_CALLBACK_ERROR = "ledger_callback_error"
    LEDGER_DESTROYED = "ledger_destroyed"

    # 4. Delivery / ingest
    DELIVERY_OK = "delivery_ok"
    DELIVERY_ERROR = "delivery_error"
    BATCH_RECEIVED = "batch_received"


EVENT_SEVERITY = {
    EventType.SIGNALS_COLLECTED: logging.DEBUG,
    EventType.INTENT_RESOLVED: logging.INFO,
    EventType.INTENT_FALLBACK: logging.INFO,
    EventType.DECISION_COMPOSED: logging.DEBUG,
    EventType.INTERACTION_CLASSIFIED: logging.DEBUG,
    EventType.FRICTION_DETECTED: logging.WARNING,
    EventType.MIDDLEWARE_OVERRIDE: logging.DEBUG,
    EventType.MIDDLEWARE_ERROR: logging.ERROR,
    EventType.LISTENER_ATTACHED: logging.INFO,
    EventType.LEDGER_DUPLICATE_DROPPED: logging.DEBUG,
    EventType.LEDGER_BATCH_FLUSHED: logging.INFO,
    EventType.LEDGER_PERSIST_ERROR: logging.WARNING,
    EventType.LEDGER_RESTORE_OK: logging.INFO,
    EventType.LEDGER_RESTORE_ERROR: logging.WARNING,
    EventType.LEDGER_CALLBACK_ERROR: logging.ERROR,
    EventType.LEDGER_DESTROYED: logging.DEBUG,
    EventType.DELIVERY_OK: logging.DEBUG,
    EventType.DELIVERY_ERROR: logging.ERROR,
    EventType.BATCH_RECEIVED: logging.INFO,
}


class SafeJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles common non-serializable types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (set, frozenset, tuple)):
            return list(obj)
        if hasattr(obj, "__dict__"):
            return str(obj)
        return super().default(obj)


class StructuredLogger:
    """
    Structured event logger with sampling and redaction

    Features:
    - Correlation via run_id (process) + session (visitor, HMAC-hashed)
    - Sampling: 10% for INFO, 100% for ERROR/CRITICAL
    - Redaction: query strings stripped from paths
    - One-line JSON output for easy parsing
    """

    def __init__(
        self,
        run_id: str | None = None,
        sample_rate_info: float = 0.1,
        sample_rate_error: float = 1.0,
    ):
        """
        Args:
            run_id: Unique ID for this process run (e.g., "20261018_101500")
            sample_rate_info: % of INFO logs to emit (0.0-1.0)
            sample_rate_error: % of ERROR logs to emit (0.0-1.0)
        """
        self.run_id = run_id or self._generate_run_id()
        self.sample_rate_info = sample_rate_info
        self.sample_rate_error = sample_rate_error
        self._rate_limiter: dict[str, datetime] = {}
        self._rate_limiter_lock = threading.Lock()
        self._last_cleanup = datetime.now(UTC)
        self._salt = secrets.token_bytes(32)

    @staticmethod
    def _generate_run_id() -> str:
        """Generate run ID: YYYYMMDD_HHMMSS"""
        return datetime.now(UTC).strftime("%Y%m%d_%H%M%S")

    def hash_session_id(self, session_id: str) -> str:
        """HMAC the visitor session id so raw ids never reach log storage

        Side Effects:
            None (pure function - computes HMAC hash only)
        """
        if not session_id:
            return "unknown"
        h = hmac.new(self._salt, session_id.encode("utf-8"), "sha256")
        return h.hexdigest()[:16]

    @staticmethod
    def redact_path(path: str, max_len: int = 80) -> str:
        """Drop the query string and truncate

        Side Effects:
            None (pure function)
        """
        if not path:
            return ""
        bare = path.split("?", 1)[0]
        return bare[:max_len] + ("..." if len(bare) > max_len else "")

    def _should_log(self, event_type: EventType) -> bool:
        """Determine if event should be logged based on sampling rate"""
        severity = EVENT_SEVERITY.get(event_type, logging.INFO)

        if severity >= logging.ERROR:
            return random.random() < self.sample_rate_error

        return random.random() < self.sample_rate_info

    def _rate_limit(self, event_key: str, min_interval_sec: float = 60.0) -> bool:
        """
        Rate limit events by key (e.g., "friction_detected:3f9a...")

        Returns:
            True if event should be logged, False if rate limited
        """
        now = datetime.now(UTC)

        with self._rate_limiter_lock:
            # Entries older than 1 hour are dropped every 5 minutes
            if (now - self._last_cleanup).total_seconds() > 300:
                cutoff = now - timedelta(hours=1)
                self._rate_limiter = {k: v for k, v in self._rate_limiter.items() if v > cutoff}
                self._last_cleanup = now

            last_log = self._rate_limiter.get(event_key)

            if last_log and (now - last_log).total_seconds() < min_interval_sec:
                return False

            self._rate_limiter[event_key] = now
            return True

    def log_event(
        self,
        event_type: EventType,
        session_id: str | None = None,
        rate_limit_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Log a structured event

        Args:
            event_type: Event type from EventType enum
            session_id: Visitor session id (hashed before output)
            rate_limit_key: Optional key for rate limiting (default: event_type + session)
            **kwargs: Additional fields for the event

        Side Effects:
            - Writes structured JSON log entry to logging system
            - Updates rate limiter dictionary (thread-safe)
        """
        if not self._should_log(event_type):
            return

        rl_key = rate_limit_key or f"{event_type.value}:{self.hash_session_id(session_id or 'none')}"
        severity = EVENT_SEVERITY.get(event_type, logging.INFO)

        # Errors are never rate limited
        if severity < logging.ERROR and not self._rate_limit(rl_key):
            return

        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": logging.getLevelName(severity),
            "run": self.run_id,
            "event": event_type.value,
        }

        if session_id:
            event["session"] = self.hash_session_id(session_id)

        for key, value in kwargs.items():
            if key == "path" and isinstance(value, str):
                event[key] = self.redact_path(value)
            elif isinstance(value, str) and len(value) > 200:
                event[key] = value[:200] + "..."
            else:
                event[key] = value

        try:
            json_line = json.dumps(event, separators=(",", ":"), cls=SafeJSONEncoder)
            logger.log(severity, json_line)
        except Exception as e:
            logger.error(
                "structured_log_error: failed to serialize event type=%s error=%s", event_type, e
            )

    # Convenience methods for common events

    def intent_resolved(self, category: str, confidence: str, score: float, signal_count: int) -> None:
        """Log a resolution outcome

        Side Effects:
            - Logs event to application logger via log_event()
        """
        event_type = EventType.INTENT_FALLBACK if category == "default" else EventType.INTENT_RESOLVED
        self.log_event(
            event_type,
            rate_limit_key=f"{event_type.value}:{category}:{confidence}",
            category=category,
            confidence=confidence,
            score=round(score, 3),
            signals=signal_count,
        )

    def friction_detected(self, session_id: str, element_key: str, path: str) -> None:
        """Log a rage-click burst

        Side Effects:
            - Logs event to application logger via log_event()
        """
        self.log_event(
            EventType.FRICTION_DETECTED,
            session_id=session_id,
            rate_limit_key=f"friction:{self.hash_session_id(session_id)}:{element_key}",
            element=element_key[:40],
            path=path,
        )

    def batch_flushed(self, session_id: str, batch_id: str, trigger: str, event_count: int) -> None:
        """Log a ledger flush

        Side Effects:
            - Logs event to application logger via log_event()
        """
        self.log_event(
            EventType.LEDGER_BATCH_FLUSHED,
            session_id=session_id,
            rate_limit_key=f"flush:{batch_id}",
            batch=batch_id,
            trigger=trigger,
            event_count=event_count,
        )


_global_logger: StructuredLogger | None = None


def get_structured_logger(run_id: str | None = None) -> StructuredLogger:
    """
    Get or create the global structured logger

    Args:
        run_id: Optional run ID (creates new logger if provided)

    Side Effects:
        - May modify global _global_logger variable if creating new logger
    """
    global _global_logger

    if run_id or _global_logger is None:
        _global_logger = StructuredLogger(run_id=run_id)

    return _global_logger
