"""Discovery module - UDP broadcast server discovery."""

from .interfaces import GLOBAL_BROADCAST, get_broadcast_targets, subnet_broadcast
from .listener import BroadcastListener
from .models import DiscoveredServer
from .protocol import DISCOVERY_PORT, DISCOVERY_QUERY, parse_announcement
from .results import DiscoveredServerList
from .service import DiscoveryService

__all__ = [
    "BroadcastListener",
    "DiscoveredServer",
    "DiscoveredServerList",
    "DiscoveryService",
    "DISCOVERY_PORT",
    "DISCOVERY_QUERY",
    "GLOBAL_BROADCAST",
    "get_broadcast_targets",
    "parse_announcement",
    "subnet_broadcast",
]
