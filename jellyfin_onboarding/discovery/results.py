"""Ordered, de-duplicated set of discovered servers."""

from typing import Iterator

from .models import DiscoveredServer


class DiscoveredServerList:
    """Discovered servers in the order they were first seen.

    Only the discovery aggregator writes to this list. Readers should
    take a ``snapshot()`` rather than iterate while discovery is running.
    """

    def __init__(self) -> None:
        self._servers: list[DiscoveredServer] = []

    def merge(self, server: DiscoveredServer) -> bool:
        """Add a server unless an equal record is already present.

        Returns:
            True if the server was added.
        """
        if server in self._servers:
            return False
        self._servers.append(server)
        return True

    def clear(self) -> None:
        self._servers = []

    def snapshot(self) -> list[DiscoveredServer]:
        """Copy of the current list."""
        return list(self._servers)

    def __len__(self) -> int:
        return len(self._servers)

    def __iter__(self) -> Iterator[DiscoveredServer]:
        return iter(self.snapshot())

    def __contains__(self, server: object) -> bool:
        return server in self._servers
