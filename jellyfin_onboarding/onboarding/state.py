"""Observable onboarding state for UI bindings."""

import logging
from enum import Enum
from typing import Callable

from ..discovery.models import DiscoveredServer

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Where the onboarding flow is."""
    NONE = "none"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class OnboardingState:
    """State shown by the onboarding screen.

    Observers registered with ``subscribe`` are called with the name of
    each property that changed.
    """

    def __init__(self) -> None:
        self._status = ConnectionState.NONE
        self._error_message = ""
        self._uri_string = ""
        self._discovered_servers: list[DiscoveredServer] = []
        self._observers: list[Callable[[str], None]] = []

    def subscribe(self, observer: Callable[[str], None]) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: Callable[[str], None]) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, *names: str) -> None:
        for name in names:
            for observer in list(self._observers):
                try:
                    observer(name)
                except Exception:
                    logger.exception("State observer failed for %s", name)

    @property
    def status(self) -> ConnectionState:
        return self._status

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def accept_connections(self) -> bool:
        """Whether the UI should allow a new connection attempt."""
        return self._status not in (ConnectionState.CONNECTING, ConnectionState.CONNECTED)

    @property
    def connect_error(self) -> bool:
        return self._status == ConnectionState.ERROR

    @property
    def uri_string(self) -> str:
        return self._uri_string

    @uri_string.setter
    def uri_string(self, value: str) -> None:
        self._uri_string = value
        self._notify("uri_string")

    @property
    def discovered_servers(self) -> list[DiscoveredServer]:
        return list(self._discovered_servers)

    def set_connecting(self) -> None:
        """Enter CONNECTING. Clears any previous error message."""
        self._error_message = ""
        self._set_status(ConnectionState.CONNECTING)

    def set_connected(self) -> None:
        self._set_status(ConnectionState.CONNECTED)

    def set_error(self, message: str) -> None:
        self._error_message = message
        self._set_status(ConnectionState.ERROR)

    def reset(self) -> None:
        """Return to NONE, e.g. when the user goes back to onboarding."""
        self._error_message = ""
        self._set_status(ConnectionState.NONE)

    def add_discovered_server(self, server: DiscoveredServer) -> None:
        if server in self._discovered_servers:
            return
        self._discovered_servers.append(server)
        self._notify("discovered_servers")

    def clear_discovered_servers(self) -> None:
        self._discovered_servers = []
        self._notify("discovered_servers")

    def _set_status(self, status: ConnectionState) -> None:
        self._status = status
        self._notify("status", "accept_connections", "connect_error", "error_message")
