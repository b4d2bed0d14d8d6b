"""Wire format of the server discovery protocol.

Clients broadcast a fixed ASCII query on UDP port 7359. Servers answer
with a JSON announcement:
{
    "Address": "http://192.168.1.20:8096",
    "Id": "b1f6a3...",
    "Name": "living-room",
    "EndpointAddress": null
}
"""

import json
import logging
from typing import Optional

from .models import DiscoveredServer

logger = logging.getLogger(__name__)

# Fixed UDP port servers listen on for discovery queries
DISCOVERY_PORT = 7359

DISCOVERY_QUERY = "Who is JellyfinServer?"

# Largest reply we read from a single datagram
RECEIVE_BUFFER_SIZE = 4096


def encode_query(query: str = DISCOVERY_QUERY) -> bytes:
    """Encode the discovery query payload."""
    return query.encode("ascii")


def parse_announcement(data: bytes, sender: Optional[str] = None) -> Optional[DiscoveredServer]:
    """Parse a reply datagram into a DiscoveredServer.

    Args:
        data: Raw datagram payload.
        sender: IP address the datagram came from.

    Returns:
        DiscoveredServer, or None if the payload is not a valid announcement.
    """
    try:
        message = json.loads(data.decode("utf-8").rstrip("\x00"))
    except (ValueError, RecursionError):
        # ValueError covers bad UTF-8 and bad JSON; deep nesting overflows the decoder
        logger.debug("Dropping undecodable reply from %s", sender)
        return None

    if not isinstance(message, dict):
        logger.debug("Dropping non-object reply from %s", sender)
        return None

    address = message.get("Address")
    server_id = message.get("Id")
    name = message.get("Name")

    for value in (address, server_id, name):
        if not isinstance(value, str) or not value:
            logger.debug("Dropping incomplete announcement from %s", sender)
            return None

    endpoint = message.get("EndpointAddress")
    if not isinstance(endpoint, str) or not endpoint:
        endpoint = sender

    return DiscoveredServer(
        address=address,
        id=server_id,
        name=name,
        endpoint_address=endpoint,
    )
