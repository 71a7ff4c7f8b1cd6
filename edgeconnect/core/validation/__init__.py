"""Validation helpers for identifiers crossing the service boundary."""

from .ids import IncorrectParameterError, validate_id

__all__ = [
    "IncorrectParameterError",
    "validate_id",
]
