"""Utility functions for sandbox_coder."""

from .config import Settings
from .logging import configure_logging
from .retry import RetryExhaustedError, retry_with_backoff, retry_with_fixed_delay
from .serializer import (
    deserialize,
    is_json_serializable,
    json_serialize,
    safe_serialize,
    serialize,
)

__all__ = [
    "Settings",
    "configure_logging",
    "RetryExhaustedError",
    "retry_with_backoff",
    "retry_with_fixed_delay",
    "is_json_serializable",
    "serialize",
    "json_serialize",
    "safe_serialize",
    "deserialize",
]
