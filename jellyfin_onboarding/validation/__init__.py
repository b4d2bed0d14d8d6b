"""Validation module - HTTP checks of candidate server addresses."""

from .diagnostics import Diagnostic, DiagnosticKind, ValidationResult
from .retry_policy import RetryPolicy
from .uri import is_well_formed, normalize_uri
from .validator import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_REQUEST_TIMEOUT,
    SERVER_MARKER,
    ConnectionValidator,
)

__all__ = [
    "ConnectionValidator",
    "Diagnostic",
    "DiagnosticKind",
    "ValidationResult",
    "RetryPolicy",
    "is_well_formed",
    "normalize_uri",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_REQUEST_TIMEOUT",
    "SERVER_MARKER",
]
