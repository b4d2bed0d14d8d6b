"""Discovery service - probes every broadcast address in parallel.

One BroadcastListener runs per target address. Listeners push replies
onto a queue; a single aggregator thread drains it and merges records into
the DiscoveredServerList, so the list never has more than one writer.
"""

import logging
import queue
import threading
import time
from typing import Callable, Optional

from .interfaces import get_broadcast_targets
from .listener import DEFAULT_POLL_INTERVAL, DEFAULT_RECEIVE_TIMEOUT, BroadcastListener
from .models import DiscoveredServer
from .protocol import DISCOVERY_PORT, DISCOVERY_QUERY
from .results import DiscoveredServerList

logger = logging.getLogger(__name__)

# Queued in place of a server to wake the aggregator for shutdown
_STOP = object()


class DiscoveryService:
    """Finds servers on the local network.

    Usage:
        with DiscoveryService() as discovery:
            discovery.start()
            servers = discovery.wait_for(5.0)
    """

    def __init__(
        self,
        port: int = DISCOVERY_PORT,
        query: str = DISCOVERY_QUERY,
        receive_timeout: float = DEFAULT_RECEIVE_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_server_discovered: Optional[Callable[[DiscoveredServer], None]] = None,
        targets_provider: Callable[[], list[str]] = get_broadcast_targets,
    ):
        """Initialize discovery service.

        Args:
            port: UDP port servers listen on. Default: 7359.
            query: ASCII query payload.
            receive_timeout: Quiet period before each listener re-broadcasts.
            poll_interval: Listener socket timeout, bounds shutdown latency.
            on_server_discovered: Called on the aggregator thread for every
                newly added server.
            targets_provider: Returns the broadcast addresses to probe.
        """
        self.port = port
        self.query = query
        self.receive_timeout = receive_timeout
        self.poll_interval = poll_interval
        self.on_server_discovered = on_server_discovered
        self._targets_provider = targets_provider
        self.servers = DiscoveredServerList()
        self._listeners: list[BroadcastListener] = []
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._aggregator: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._aggregator is not None

    @property
    def listener_count(self) -> int:
        """Number of listeners still running."""
        return sum(1 for listener in self._listeners if listener.is_alive)

    def start(self) -> None:
        """Start a discovery round.

        Does nothing if a round is already running. Returns without waiting
        for replies. Listeners that fail to open a socket are logged and
        skipped.
        """
        with self._lock:
            if self._aggregator is not None:
                logger.debug("Discovery already running")
                return

            self.servers.clear()
            self._queue = queue.Queue()
            self._aggregator = threading.Thread(
                target=self._aggregate,
                args=(self._queue,),
                name="discovery-aggregator",
                daemon=True,
            )
            self._aggregator.start()

            targets = self._targets_provider()
            logger.info("Starting discovery on %d broadcast address(es)", len(targets))

            for address in targets:
                listener = BroadcastListener(
                    address,
                    on_server=self._queue.put,
                    port=self.port,
                    query=self.query,
                    receive_timeout=self.receive_timeout,
                    poll_interval=self.poll_interval,
                )
                try:
                    listener.start()
                except OSError as e:
                    logger.warning("Could not start discovery on %s: %s", address, e)
                    continue
                self._listeners.append(listener)

    def stop(self) -> None:
        """Stop every listener and the aggregator.

        Safe to call when not running or when some listeners already died.
        """
        with self._lock:
            if self._aggregator is None:
                return

            for listener in self._listeners:
                listener.stop()

            join_timeout = self.poll_interval * 2
            for listener in self._listeners:
                if not listener.join(join_timeout):
                    logger.warning(
                        "Listener for %s did not exit in time, closing socket",
                        listener.broadcast_address,
                    )
                listener.close()

            self._queue.put(_STOP)
            self._aggregator.join(join_timeout)

            self._listeners = []
            self._aggregator = None
            logger.info("Discovery stopped with %d server(s) found", len(self.servers))

    def wait_for(self, timeout: float) -> list[DiscoveredServer]:
        """Let discovery run for ``timeout`` seconds and return what was found."""
        time.sleep(timeout)
        return self.servers.snapshot()

    def _aggregate(self, inbox: "queue.Queue[object]") -> None:
        while True:
            item = inbox.get()
            if item is _STOP:
                return
            if not isinstance(item, DiscoveredServer):
                continue

            if self.servers.merge(item):
                logger.info("Discovered server: %s", item)
                if self.on_server_discovered:
                    try:
                        self.on_server_discovered(item)
                    except Exception:
                        logger.exception("on_server_discovered callback failed")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.stop()
