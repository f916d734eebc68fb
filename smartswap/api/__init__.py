"""SmartSwap HTTP API."""

from __future__ import annotations

import os


def main() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "smartswap.api.app:app",
        host=os.getenv("SMARTSWAP_HOST", "127.0.0.1"),
        port=int(os.getenv("SMARTSWAP_PORT", "8000")),
        reload=os.getenv("SMARTSWAP_RELOAD", "false").lower() == "true",
    )
