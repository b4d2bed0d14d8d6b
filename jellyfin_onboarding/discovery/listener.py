"""Per-address broadcast listener.

Each listener owns one UDP socket and one background thread. The thread
sends the discovery query to its broadcast address, then collects replies
until the network has been quiet for ``receive_timeout`` seconds, and
starts over. It runs until stopped or until the socket fails.
"""

import logging
import socket
import threading
import time
from typing import Callable, Optional

from .models import DiscoveredServer
from .protocol import (
    DISCOVERY_PORT,
    DISCOVERY_QUERY,
    RECEIVE_BUFFER_SIZE,
    encode_query,
    parse_announcement,
)

logger = logging.getLogger(__name__)

# Default quiet period before the query is broadcast again
DEFAULT_RECEIVE_TIMEOUT = 30.0

# Upper bound on how long a blocked receive delays a stop request
DEFAULT_POLL_INTERVAL = 1.0


class BroadcastListener:
    """Broadcasts discovery queries to one address and reports replies.

    Replies are parsed on the listener thread and handed to ``on_server``.
    The callback must not touch shared state directly; the discovery
    service passes a queue ``put`` here.
    """

    def __init__(
        self,
        broadcast_address: str,
        on_server: Callable[[DiscoveredServer], None],
        port: int = DISCOVERY_PORT,
        query: str = DISCOVERY_QUERY,
        receive_timeout: float = DEFAULT_RECEIVE_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """Initialize listener.

        Args:
            broadcast_address: IPv4 broadcast address to probe.
            on_server: Called with every well-formed announcement.
            port: UDP port servers listen on. Default: 7359.
            query: ASCII query payload.
            receive_timeout: Quiet period in seconds before re-broadcasting.
            poll_interval: Socket timeout used to check for stop requests.
        """
        self.broadcast_address = broadcast_address
        self.port = port
        self.receive_timeout = receive_timeout
        self.poll_interval = min(poll_interval, receive_timeout)
        self._on_server = on_server
        self._payload = encode_query(query)
        self._sock: Optional[socket.socket] = None
        self._sock_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _create_socket(self) -> socket.socket:
        """Create and configure the UDP socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.settimeout(self.poll_interval)
        return sock

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_closed(self) -> bool:
        return self._sock is None

    def start(self) -> None:
        """Open the socket and start the listener thread.

        Raises:
            RuntimeError: If the listener was already started.
            OSError: If the socket cannot be created.
        """
        if self._thread is not None:
            raise RuntimeError(f"Listener for {self.broadcast_address} already started")

        self._sock = self._create_socket()
        self._thread = threading.Thread(
            target=self._run,
            name=f"discovery-{self.broadcast_address}",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Ask the thread to exit at its next loop boundary."""
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the thread to exit.

        Returns:
            True if the thread is no longer running.
        """
        if self._thread is not None:
            self._thread.join(timeout)
        return not self.is_alive

    def _run(self) -> None:
        sock = self._sock
        if sock is None:
            return

        try:
            while not self._stop_event.is_set():
                sock.sendto(self._payload, (self.broadcast_address, self.port))
                logger.debug("Sent discovery query to %s:%d", self.broadcast_address, self.port)
                self._receive_replies(sock)

        except OSError as e:
            if self._stop_event.is_set():
                logger.debug("Listener for %s closed during shutdown", self.broadcast_address)
            else:
                logger.warning(
                    "Discovery on %s stopped: %s", self.broadcast_address, e
                )
        finally:
            self.close()

    def _receive_replies(self, sock: socket.socket) -> None:
        """Read replies until the quiet period elapses or a stop is requested.

        Raises:
            OSError: On any transport error other than a receive timeout.
        """
        deadline = time.monotonic() + self.receive_timeout

        while not self._stop_event.is_set() and time.monotonic() < deadline:
            try:
                data, addr = sock.recvfrom(RECEIVE_BUFFER_SIZE)
            except socket.timeout:
                continue

            server = parse_announcement(data, addr[0])
            if server is None:
                continue

            # Only real announcements extend the quiet period
            self._on_server(server)
            deadline = time.monotonic() + self.receive_timeout

    def close(self) -> None:
        """Close the UDP socket. Safe to call more than once."""
        with self._sock_lock:
            if self._sock:
                try:
                    self._sock.close()
                except OSError:
                    pass
                self._sock = None
