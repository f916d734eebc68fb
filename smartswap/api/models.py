"""Pydantic request/response models for the SmartSwap API.

This module contains shared Pydantic models and validation helpers
used across API endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from smartswap.config import API_MAX_PARAMS

# =============================================================================
# VALIDATION HELPERS
# =============================================================================

# Limits for client-supplied free-form dicts (middleware_data)
MAX_DICT_SIZE = 100  # Maximum number of keys in any dict
MAX_STRING_LENGTH = 10_000  # Maximum string length in dict values
MAX_DICT_DEPTH = 5  # Maximum nesting depth


def validate_dict_structure(
    data: dict[str, Any],
    max_keys: int = MAX_DICT_SIZE,
    max_str_len: int = MAX_STRING_LENGTH,
    max_depth: int = MAX_DICT_DEPTH,
    current_depth: int = 0,
) -> None:
    """
    Validate dict structure to reject oversized or deeply nested payloads.

    Args:
        data: Dict to validate
        max_keys: Maximum number of keys allowed
        max_str_len: Maximum string value length
        max_depth: Maximum nesting depth (dicts + lists combined)
        current_depth: Current recursion depth

    Raises:
        ValueError: If validation fails
    """
    if current_depth > max_depth:
        raise ValueError(f"Dict nesting exceeds maximum depth of {max_depth}")

    if len(data) > max_keys:
        raise ValueError(f"Dict has too many keys: {len(data)} > {max_keys}")

    for key, value in data.items():
        if isinstance(key, str) and len(key) > 100:
            raise ValueError(f"Dict key too long: {len(key)} > 100")

        if isinstance(value, str):
            if len(value) > max_str_len:
                raise ValueError(f"String value too long: {len(value)} > {max_str_len}")
        elif isinstance(value, dict):
            validate_dict_structure(value, max_keys, max_str_len, max_depth, current_depth + 1)
        elif isinstance(value, list):
            _validate_list_structure(value, max_keys, max_str_len, max_depth, current_depth + 1)


def _validate_list_structure(
    data: list[Any],
    max_keys: int,
    max_str_len: int,
    max_depth: int,
    current_depth: int,
) -> None:
    if current_depth > max_depth:
        raise ValueError(f"List nesting exceeds maximum depth of {max_depth}")

    if len(data) > max_keys:
        raise ValueError(f"List too long: {len(data)} > {max_keys}")

    for item in data:
        if isinstance(item, dict):
            validate_dict_structure(item, max_keys, max_str_len, max_depth, current_depth + 1)
        elif isinstance(item, list):
            _validate_list_structure(item, max_keys, max_str_len, max_depth, current_depth + 1)
        elif isinstance(item, str) and len(item) > max_str_len:
            raise ValueError(f"String value too long in list: {len(item)} > {max_str_len}")


# =============================================================================
# REQUEST MODELS
# =============================================================================


class PersonalizeRequest(BaseModel):
    """Visit context: raw (still percent-encoded) parameters plus referrer."""

    params: dict[str, str] = Field(default_factory=dict)
    referrer: str = Field(default="", max_length=2048)

    @field_validator("params")
    @classmethod
    def _limit_params(cls, value: dict[str, str]) -> dict[str, str]:
        if len(value) > API_MAX_PARAMS:
            raise ValueError(f"Too many parameters: {len(value)} > {API_MAX_PARAMS}")
        validate_dict_structure(value, max_keys=API_MAX_PARAMS, max_str_len=2048, max_depth=0)
        return value


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class BatchReceipt(BaseModel):
    batch_id: str
    accepted: int
    friction_events: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    error_count: int = 1
    invalid_fields: list[str] = []
