import json

from jellyfin_onboarding.discovery.models import DiscoveredServer
from jellyfin_onboarding.discovery.protocol import (
    DISCOVERY_PORT,
    DISCOVERY_QUERY,
    encode_query,
    parse_announcement,
)

from .helpers import announcement


def test_query_payload_is_ascii():
    assert DISCOVERY_PORT == 7359
    assert encode_query() == b"Who is JellyfinServer?"
    assert encode_query(DISCOVERY_QUERY).decode("ascii") == DISCOVERY_QUERY


def test_parse_valid_announcement():
    server = parse_announcement(announcement(), "192.168.1.20")

    assert server == DiscoveredServer(
        address="http://192.168.1.20:8096", id="4f1a9c", name="living-room"
    )
    assert server.address == "http://192.168.1.20:8096"
    assert server.endpoint_address == "192.168.1.20"


def test_parse_keeps_advertised_endpoint():
    data = json.dumps({
        "Address": "http://media.lan:8096",
        "Id": "abc",
        "Name": "media",
        "EndpointAddress": "10.0.0.5",
    }).encode()

    server = parse_announcement(data, "10.0.0.9")

    assert server.endpoint_address == "10.0.0.5"


def test_parse_tolerates_trailing_nul_padding():
    server = parse_announcement(announcement() + b"\x00" * 32, "10.0.0.1")

    assert server is not None
    assert server.name == "living-room"


def test_parse_drops_invalid_json():
    assert parse_announcement(b"not json at all", "10.0.0.1") is None


def test_parse_drops_invalid_utf8():
    assert parse_announcement(b"\xff\xfe\xfa", "10.0.0.1") is None


def test_parse_drops_non_object():
    assert parse_announcement(b'["Address", "Id"]', "10.0.0.1") is None


def test_parse_drops_missing_or_empty_fields():
    missing_id = json.dumps({"Address": "http://x:8096", "Name": "x"}).encode()
    empty_name = json.dumps({"Address": "http://x:8096", "Id": "1", "Name": ""}).encode()
    numeric_id = json.dumps({"Address": "http://x:8096", "Id": 7, "Name": "x"}).encode()

    assert parse_announcement(missing_id, "10.0.0.1") is None
    assert parse_announcement(empty_name, "10.0.0.1") is None
    assert parse_announcement(numeric_id, "10.0.0.1") is None


def test_parse_drops_deeply_nested_json():
    assert parse_announcement(b"[" * 4000, "10.0.0.1") is None
