"""FastAPI server for SmartSwap personalization and event intake"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smartswap.api.routes.events import router as events_router
from smartswap.api.routes.health import router as health_router
from smartswap.api.routes.personalize import router as personalize_router
from smartswap.config import APP_VERSION
from smartswap.observability.logging import get_logger
from smartswap.observability.telemetry import counter

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)

app = FastAPI(title="SmartSwap API", version=APP_VERSION)


# Custom validation error handler to prevent information leakage
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Return field names only, never the validation rules themselves.

    Side Effects:
        - Logs validation errors for debugging (path only, no query string)
        - Increments validation error counter for monitoring
    """
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


# CORS - storefront origins come from SMARTSWAP_ALLOWED_ORIGINS (comma-separated)
ALLOWED_ORIGINS = [
    origin.strip() for origin in os.getenv("SMARTSWAP_ALLOWED_ORIGINS", "").split(",") if origin.strip()
]

# Allow localhost in development only
if os.getenv("SMARTSWAP_ENV", "development") == "development":
    ALLOWED_ORIGINS.extend(
        [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://localhost:8000",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:8000",
        ]
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

app.include_router(health_router)
app.include_router(personalize_router)
app.include_router(events_router)

logger.info("SmartSwap API %s ready (%d allowed origins)", APP_VERSION, len(ALLOWED_ORIGINS))
