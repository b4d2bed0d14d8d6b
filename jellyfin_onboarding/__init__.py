"""Server discovery and connection validation for the Jellyfin client shell."""

from .config import OnboardingConfig, load_config
from .discovery import DiscoveredServer, DiscoveryService
from .onboarding import ConnectionState, OnboardingController, OnboardingState
from .validation import ConnectionValidator, DiagnosticKind, ValidationResult

__version__ = "0.1.0"

__all__ = [
    "ConnectionState",
    "ConnectionValidator",
    "DiagnosticKind",
    "DiscoveredServer",
    "DiscoveryService",
    "OnboardingConfig",
    "OnboardingController",
    "OnboardingState",
    "ValidationResult",
    "load_config",
]
