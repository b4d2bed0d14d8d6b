"""Onboarding module - connection state machine."""

from .controller import InMemoryServerStore, OnboardingController, ServerAddressStore
from .state import ConnectionState, OnboardingState

__all__ = [
    "ConnectionState",
    "InMemoryServerStore",
    "OnboardingController",
    "OnboardingState",
    "ServerAddressStore",
]
