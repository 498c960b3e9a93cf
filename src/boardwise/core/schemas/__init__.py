"""Schema validation utilities for boardwise.

Centralized JSON schema loading and validation for catalog documents and
tool settings.
"""
from __future__ import annotations

from .validation import (
    load_schema,
    validate_payload,
    validate_payload_safe,
    SchemaValidationError,
)

__all__ = [
    "load_schema",
    "validate_payload",
    "validate_payload_safe",
    "SchemaValidationError",
]
