"""
SmartSwap tracking - semantic interaction classification and the event ledger.
"""

from smartswap.tracking.capture import DelegatedCapture
from smartswap.tracking.classifier import Classification, ElementClassifier
from smartswap.tracking.dom import ElementNode, RawInteraction
from smartswap.tracking.frustration import FrustrationDetector, element_key
from smartswap.tracking.ledger import EventLedger, LedgerConfig, to_storage_row
from smartswap.tracking.listener import ListenerConfig, SmartListener
from smartswap.tracking.middleware import MiddlewareChain, Override
from smartswap.tracking.models import (
    Batch,
    ElementDescriptor,
    EventRecord,
    FlushTrigger,
    LedgerStats,
    SemanticScore,
    SmartEventType,
)
from smartswap.tracking.scheduling import AsyncioScheduler, PageEvent, PageLifecycle
from smartswap.tracking.sinks import CollectingSink, StructuredLogSink, log_sink
from smartswap.tracking.storage import InMemoryStore, JsonFileStore

__all__ = [
    # Models
    "Batch",
    "ElementDescriptor",
    "EventRecord",
    "FlushTrigger",
    "LedgerStats",
    "SemanticScore",
    "SmartEventType",
    # Capture
    "DelegatedCapture",
    "ElementNode",
    "RawInteraction",
    # Classification
    "Classification",
    "ElementClassifier",
    "FrustrationDetector",
    "element_key",
    "MiddlewareChain",
    "Override",
    # Listener / ledger
    "ListenerConfig",
    "SmartListener",
    "EventLedger",
    "LedgerConfig",
    "to_storage_row",
    # Runtime seams
    "AsyncioScheduler",
    "PageEvent",
    "PageLifecycle",
    "InMemoryStore",
    "JsonFileStore",
    "CollectingSink",
    "StructuredLogSink",
    "log_sink",
]
