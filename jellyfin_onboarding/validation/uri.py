"""Server address parsing and normalization."""

import ipaddress
import re
from urllib.parse import urlsplit, urlunsplit

SUPPORTED_SCHEMES = ("http", "https")

DEFAULT_SCHEME = "http"

# DNS limits
MAX_HOSTNAME_LENGTH = 253
MAX_LABEL_LENGTH = 63

_SCHEME_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
_HOSTNAME = re.compile(r"^[A-Za-z0-9._~%\-]+$")


def normalize_uri(uri_string: str) -> str:
    """Turn user input into an absolute http(s) URL.

    Input without ``scheme://`` is treated as ``host[:port][/path]`` and
    gets the default scheme, so ``myserver:8096`` becomes
    ``http://myserver:8096/`` rather than a URI with scheme ``myserver``.
    An empty path becomes ``/``.

    Args:
        uri_string: Address as typed by the user or sent by a server.

    Returns:
        Normalized URL string.

    Raises:
        ValueError: If the input cannot be made into an absolute http(s) URL.
    """
    if not isinstance(uri_string, str):
        raise ValueError(f"Expected a string, got {type(uri_string).__name__}")

    candidate = uri_string.strip()
    if not candidate:
        raise ValueError("Address is empty")
    if any(c.isspace() for c in candidate):
        raise ValueError(f"Address contains whitespace: {candidate!r}")

    if not _SCHEME_PREFIX.match(candidate):
        candidate = f"{DEFAULT_SCHEME}://{candidate}"

    parts = urlsplit(candidate)
    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise ValueError(f"Unsupported scheme: {parts.scheme}")

    host = parts.hostname
    if not host:
        raise ValueError(f"Missing host in {uri_string!r}")
    _check_host(host)

    # Raises ValueError for non-numeric or out-of-range ports
    if parts.port == 0:
        raise ValueError("Port 0 is not usable")

    return urlunsplit((scheme, parts.netloc, parts.path or "/", parts.query, parts.fragment))


def is_well_formed(uri_string: str) -> bool:
    """Whether ``normalize_uri`` accepts the input."""
    try:
        normalize_uri(uri_string)
    except ValueError:
        return False
    return True


def _check_host(host: str) -> None:
    if ":" in host:
        ipaddress.IPv6Address(host.split("%", 1)[0])
        return
    if not _HOSTNAME.match(host):
        raise ValueError(f"Invalid host: {host}")
    if len(host.rstrip(".")) > MAX_HOSTNAME_LENGTH:
        raise ValueError(f"Host name too long: {host}")
    for label in host.rstrip(".").split("."):
        if not label or len(label) > MAX_LABEL_LENGTH:
            raise ValueError(f"Invalid host label in {host}")
