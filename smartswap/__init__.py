"""SmartSwap - intent-driven storefront personalization and session telemetry"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports keep `import smartswap.config` free of pydantic/yaml loading
def __getattr__(name: str):
    """
    Lazy imports to avoid loading the full pipelines when only importing lightweight modules.
    """
    if name in ("PersonalizationEngine", "personalize", "Decision"):
        from smartswap.intent import composer, engine

        if name == "Decision":
            return composer.Decision
        return getattr(engine, name)

    if name in ("EventLedger", "SmartListener"):
        from smartswap.tracking import ledger, listener

        if name == "EventLedger":
            return ledger.EventLedger
        return listener.SmartListener

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "Decision",
    "EventLedger",
    "PersonalizationEngine",
    "SmartListener",
    "personalize",
]
