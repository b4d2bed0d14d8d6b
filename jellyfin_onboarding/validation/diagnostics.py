"""Validation outcome models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DiagnosticKind(str, Enum):
    """Reasons a candidate address was rejected."""
    MALFORMED_URI = "malformed_uri"
    UNREACHABLE = "unreachable"
    INVALID_REDIRECT = "invalid_redirect"
    TOO_MANY_REDIRECTS = "too_many_redirects"
    HTTP_STATUS = "http_status"
    NOT_A_SERVER = "not_a_server"


_MESSAGES = {
    DiagnosticKind.MALFORMED_URI: "The server address is not valid.",
    DiagnosticKind.UNREACHABLE: "Could not connect to the server.",
    DiagnosticKind.INVALID_REDIRECT: "The server sent a redirect without a location.",
    DiagnosticKind.TOO_MANY_REDIRECTS: "Could not connect to the server (too many redirects).",
    DiagnosticKind.NOT_A_SERVER: "The address does not point to a Jellyfin server.",
}


@dataclass(frozen=True)
class Diagnostic:
    """Why validation failed."""
    kind: DiagnosticKind
    status_code: Optional[int] = None
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        """Short human-readable text for the error display."""
        if self.kind == DiagnosticKind.HTTP_STATUS:
            return str(self.status_code)
        return _MESSAGES[self.kind]

    @property
    def is_retryable(self) -> bool:
        """Whether re-submitting the same address may succeed."""
        return self.kind == DiagnosticKind.UNREACHABLE

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a candidate server address."""
    valid: bool
    uri: Optional[str] = None
    diagnostic: Optional[Diagnostic] = None
    redirects: int = 0

    @classmethod
    def success(cls, uri: str, redirects: int = 0) -> "ValidationResult":
        return cls(valid=True, uri=uri, redirects=redirects)

    @classmethod
    def failure(
        cls,
        kind: DiagnosticKind,
        redirects: int = 0,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> "ValidationResult":
        return cls(
            valid=False,
            diagnostic=Diagnostic(kind, status_code=status_code, detail=detail),
            redirects=redirects,
        )

    def __str__(self) -> str:
        if self.valid:
            return f"Valid: {self.uri}"
        return f"Invalid: {self.diagnostic}"
