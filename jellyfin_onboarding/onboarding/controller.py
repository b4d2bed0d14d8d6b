"""Onboarding controller - drives the connection state machine.

Connecting to a server moves the state from NONE (or ERROR) to CONNECTING,
then to CONNECTED once the address validates or to ERROR with a message.
On success the resolved address goes to the server store and the navigator
is told to open it.
"""

import logging
from typing import Callable, Optional, Protocol

from ..discovery.models import DiscoveredServer
from ..discovery.service import DiscoveryService
from ..validation.diagnostics import ValidationResult
from ..validation.uri import normalize_uri
from ..validation.validator import ConnectionValidator
from .state import OnboardingState

logger = logging.getLogger(__name__)


class ServerAddressStore(Protocol):
    """Where the active server address is kept."""

    def set_active_server(self, uri: str) -> None:
        ...


class InMemoryServerStore:
    """ServerAddressStore that keeps the address in memory."""

    def __init__(self) -> None:
        self.active_server: Optional[str] = None

    def set_active_server(self, uri: str) -> None:
        self.active_server = uri


class OnboardingController:
    """Connects the onboarding state to discovery and validation."""

    def __init__(
        self,
        validator: Optional[ConnectionValidator] = None,
        store: Optional[ServerAddressStore] = None,
        discovery: Optional[DiscoveryService] = None,
        navigator: Optional[Callable[[str], None]] = None,
        state: Optional[OnboardingState] = None,
    ):
        """Initialize controller.

        Args:
            validator: Address validator. Default: ConnectionValidator().
            store: Receives the validated address. Default: in-memory store.
            discovery: Discovery service to drive. Created on first use.
            navigator: Called with the validated address once connected.
            state: State object to drive. Default: a fresh OnboardingState.
        """
        self.validator = validator or ConnectionValidator()
        self.store = store or InMemoryServerStore()
        self.navigator = navigator
        self.state = state or OnboardingState()
        self._discovery = discovery

    def submit(self, uri_string: Optional[str] = None) -> ValidationResult:
        """Try to connect to ``uri_string`` (or the current state's address).

        Returns:
            The ValidationResult the new state was derived from.

        Raises:
            Exception: Anything the validator raises, after the state has
                been moved to ERROR.
        """
        if uri_string is None:
            uri_string = self.state.uri_string
        self.state.set_connecting()

        try:
            uri_string = normalize_uri(uri_string)
        except ValueError:
            # Validation reports the problem
            pass
        self.state.uri_string = uri_string

        try:
            result = self.validator.validate(uri_string)
        except Exception:
            logger.exception("Validation of %s failed unexpectedly", uri_string)
            self.state.set_error("Unexpected error while connecting.")
            raise

        if not result.valid:
            message = result.diagnostic.message if result.diagnostic else "Unknown error"
            logger.info("Connection to %s failed: %s", uri_string, result.diagnostic)
            self.state.set_error(message)
            return result

        self.state.uri_string = result.uri
        self.state.set_connected()
        self.store.set_active_server(result.uri)
        logger.info("Connected to %s", result.uri)

        if self.navigator:
            self.navigator(result.uri)
        return result

    def select_discovered(self, server: DiscoveredServer) -> ValidationResult:
        """Connect to a server picked from the discovered list."""
        return self.submit(server.address)

    @property
    def discovery(self) -> DiscoveryService:
        if self._discovery is None:
            self._discovery = DiscoveryService()
        return self._discovery

    def start_discovery(self) -> None:
        """Start filling the state's discovered server list."""
        discovery = self.discovery
        if discovery.is_running:
            return
        self.state.clear_discovered_servers()
        discovery.on_server_discovered = self.state.add_discovered_server
        discovery.start()

    def stop_discovery(self) -> None:
        if self._discovery is not None:
            self._discovery.stop()

    def close(self) -> None:
        """Stop discovery and release the HTTP session."""
        self.stop_discovery()
        self.validator.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
