"""Broadcast address enumeration for network interfaces."""

import ipaddress
import logging
import socket

import psutil  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

GLOBAL_BROADCAST = "255.255.255.255"


def subnet_broadcast(address: str, netmask: str) -> str:
    """Compute the subnet broadcast address as ``address | ~netmask``.

    Args:
        address: IPv4 unicast address, e.g. "192.168.1.20".
        netmask: IPv4 subnet mask, e.g. "255.255.255.0".

    Returns:
        Broadcast address string, e.g. "192.168.1.255".

    Raises:
        ValueError: If either argument is not an IPv4 address.
    """
    addr = int(ipaddress.IPv4Address(address))
    mask = int(ipaddress.IPv4Address(netmask))
    return str(ipaddress.IPv4Address(addr | (~mask & 0xFFFFFFFF)))


def get_interface_broadcasts() -> list[str]:
    """Subnet broadcast addresses of every IPv4 address on an up interface.

    Duplicates are kept, one entry per interface address.
    """
    stats = psutil.net_if_stats()
    broadcasts: list[str] = []

    for name, interface_addresses in psutil.net_if_addrs().items():
        stat = stats.get(name)
        if stat is None or not stat.isup:
            continue

        for address in interface_addresses:
            if address.family != socket.AF_INET or not address.netmask:
                continue
            try:
                broadcasts.append(subnet_broadcast(address.address, address.netmask))
            except ValueError:
                logger.debug(
                    "Skipping %s on %s: bad netmask %s",
                    address.address, name, address.netmask,
                )

    return broadcasts


def get_broadcast_targets() -> list[str]:
    """All broadcast addresses a discovery round should probe.

    The global broadcast address always comes first. If interface
    enumeration fails, it is the only target.
    """
    targets = [GLOBAL_BROADCAST]
    try:
        targets.extend(get_interface_broadcasts())
    except (OSError, psutil.Error) as e:
        logger.warning("Interface enumeration failed, using global broadcast only: %s", e)
    return targets
