"""Centralized configuration for SmartSwap.

Typed constants for the event ledger, the smart listener, frustration
detection and the API. Environment variable overrides use safe defaults so
everything runs without extra env configuration. Resolution thresholds and
source weights live in config/smartswap_policy.yaml (see
smartswap.runtime.thresholds).
"""

from __future__ import annotations

import os

# --- App ---
APP_VERSION: str = "1.0.0"

# --- Event Ledger ---
LEDGER_BATCH_SIZE: int = int(os.getenv("SMARTSWAP_LEDGER_BATCH_SIZE", "20"))
LEDGER_FLUSH_INTERVAL_MS: int = int(os.getenv("SMARTSWAP_LEDGER_FLUSH_INTERVAL_MS", "30000"))
LEDGER_IDLE_TIMEOUT_MS: int = int(os.getenv("SMARTSWAP_LEDGER_IDLE_TIMEOUT_MS", "60000"))
LEDGER_DEDUP_WINDOW_MS: int = int(os.getenv("SMARTSWAP_LEDGER_DEDUP_WINDOW_MS", "5000"))
LEDGER_STORAGE_KEY: str = os.getenv("SMARTSWAP_LEDGER_STORAGE_KEY", "pv_event_ledger")
LEDGER_PERSIST_CAP: int = 50
LEDGER_BATCH_HISTORY: int = 10
LEDGER_ENABLE_PERSISTENCE: bool = os.getenv("SMARTSWAP_LEDGER_PERSISTENCE", "true").lower() == "true"

# --- Smart Listener ---
LISTENER_MAX_ANCESTOR_DEPTH: int = 5
LISTENER_EVENT_HISTORY: int = 50
LISTENER_INIT_TIMEOUT_MS: int = 2000
LISTENER_MIN_ACTIONABLE_SCORE: int = 2
ELEMENT_TEXT_MAX_CHARS: int = 100
ELEMENT_CLASS_MAX: int = 10

# --- Frustration Detection ---
FRUSTRATION_THRESHOLD: int = int(os.getenv("SMARTSWAP_FRUSTRATION_THRESHOLD", "3"))
FRUSTRATION_WINDOW_MS: int = int(os.getenv("SMARTSWAP_FRUSTRATION_WINDOW_MS", "1000"))

# --- Signal Collection ---
SEARCH_QUERY_MIN_CHARS: int = 3

# --- API ---
API_MAX_PARAMS: int = 50
API_MAX_BATCH_EVENTS: int = 500
