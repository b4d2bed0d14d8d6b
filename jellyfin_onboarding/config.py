"""YAML configuration for the onboarding engine.

Example file:
    onboarding:
      receive_timeout: 10
      request_timeout: 5
      max_redirects: 5
      log_level: DEBUG
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Union

import yaml

from .discovery.listener import DEFAULT_RECEIVE_TIMEOUT
from .discovery.protocol import DISCOVERY_PORT, DISCOVERY_QUERY
from .validation.validator import DEFAULT_MAX_REDIRECTS, DEFAULT_REQUEST_TIMEOUT, SERVER_MARKER


@dataclass
class OnboardingConfig:
    """Tunables for discovery and validation."""
    discovery_port: int = DISCOVERY_PORT
    discovery_query: str = DISCOVERY_QUERY
    receive_timeout: float = DEFAULT_RECEIVE_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    marker: str = SERVER_MARKER
    log_level: str = "INFO"

    def __post_init__(self):
        self.log_level = self.log_level.upper()


_FIELD_TYPES = {
    "discovery_port": int,
    "discovery_query": str,
    "receive_timeout": (int, float),
    "request_timeout": (int, float),
    "max_redirects": int,
    "marker": str,
    "log_level": str,
}


def load_config(file_path: Union[str, Path]) -> OnboardingConfig:
    """Load configuration from a YAML file.

    Settings may sit under an ``onboarding`` key or at the top level.
    Unknown keys are ignored.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the YAML is not a mapping or a value has the wrong type.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return OnboardingConfig()

    return parse_config_data(data, source=str(file_path))


def parse_config_data(data: dict, source: str = "<inline>") -> OnboardingConfig:
    """Build a config from an already loaded mapping.

    Raises:
        ValueError: If the data is not a mapping or a value has the wrong type.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}")

    section = data.get("onboarding", data)
    if not isinstance(section, dict):
        raise ValueError(f"'onboarding' must be a mapping in {source}")

    known = {f.name for f in fields(OnboardingConfig)}
    values = {k: v for k, v in section.items() if k in known}

    for key, value in values.items():
        expected = _FIELD_TYPES[key]
        if isinstance(value, bool) or not isinstance(value, expected):
            raise ValueError(f"Invalid value for '{key}' in {source}: {value!r}")

    for key in ("receive_timeout", "request_timeout"):
        if key in values and values[key] <= 0:
            raise ValueError(f"'{key}' must be positive in {source}")
    if values.get("max_redirects", 0) < 0:
        raise ValueError(f"'max_redirects' must not be negative in {source}")

    return OnboardingConfig(**values)
