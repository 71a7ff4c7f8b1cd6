"""Identifier validation for service entry points."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from uuid import UUID


class IncorrectParameterError(ValueError):
    """Raised when a caller passes an absent or malformed identifier."""


def validate_id(value: Any, message: Callable[[Any], str]) -> UUID:
    """Ensure value is a UUID (or a UUID string) and return it.

    Args:
        value: Identifier to check
        message: Builds the error message from the offending value

    Raises:
        IncorrectParameterError: If value is None or not a valid UUID
    """
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            pass
    raise IncorrectParameterError(message(value))
