"""Discovered server record."""

import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class DiscoveredServer:
    """A server that answered a discovery broadcast.

    Two records describe the same server when their ``id`` and ``name``
    match. The advertised address, the sender endpoint and the receive
    time do not take part in equality.
    """
    address: str
    id: str
    name: str
    endpoint_address: Optional[str] = field(default=None, compare=False)
    received_at: float = field(default_factory=time.time, compare=False)

    def __str__(self) -> str:
        return f"{self.name} at {self.address}"

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "id": self.id,
            "name": self.name,
            "endpoint_address": self.endpoint_address,
        }
