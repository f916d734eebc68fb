"""
SmartSwap intent engine - visit context to hero/layout Decision.
"""

from __future__ import annotations

import importlib

# Lazy: runtime.thresholds imports intent.categories, and the collector imports
# runtime.thresholds, so the package itself must not import the pipeline eagerly
_EXPORTS = {
    # Enums
    "Category": "categories",
    "ConfidenceBand": "categories",
    "FunnelStage": "categories",
    "SectionId": "categories",
    # Stage 1
    "CollectorConfig": "collector",
    "SignalCollector": "collector",
    "params_from_query": "collector",
    "CollectedSignals": "types",
    "Signal": "types",
    # Stage 2
    "IntentResolver": "resolver",
    "Resolution": "types",
    # Stage 3
    "CtaDecision": "composer",
    "Decision": "composer",
    "DecisionComposer": "composer",
    # Pipeline
    "PersonalizationEngine": "engine",
    "personalize": "engine",
}


def __getattr__(name: str):
    module_name = _EXPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    module = importlib.import_module(f"{__name__}.{module_name}")
    return getattr(module, name)


__all__ = list(_EXPORTS)
