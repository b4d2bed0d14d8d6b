from jellyfin_onboarding.discovery.models import DiscoveredServer
from jellyfin_onboarding.onboarding.state import ConnectionState, OnboardingState


def test_initial_state():
    state = OnboardingState()

    assert state.status == ConnectionState.NONE
    assert state.error_message == ""
    assert state.uri_string == ""
    assert state.accept_connections
    assert not state.connect_error


def test_accept_connections_per_status():
    state = OnboardingState()

    state.set_connecting()
    assert not state.accept_connections

    state.set_connected()
    assert not state.accept_connections

    state.set_error("404")
    assert state.accept_connections
    assert state.connect_error

    state.reset()
    assert state.accept_connections
    assert not state.connect_error


def test_connecting_clears_error_message():
    state = OnboardingState()
    state.set_error("Could not connect to the server.")

    state.set_connecting()

    assert state.status == ConnectionState.CONNECTING
    assert state.error_message == ""


def test_status_change_notifies_dependent_properties():
    state = OnboardingState()
    changes = []
    state.subscribe(changes.append)

    state.set_connecting()

    assert changes == ["status", "accept_connections", "connect_error", "error_message"]


def test_uri_string_notifies():
    state = OnboardingState()
    changes = []
    state.subscribe(changes.append)

    state.uri_string = "http://media.lan/"

    assert changes == ["uri_string"]
    assert state.uri_string == "http://media.lan/"


def test_unsubscribe():
    state = OnboardingState()
    changes = []
    state.subscribe(changes.append)
    state.unsubscribe(changes.append)

    state.set_connected()

    assert changes == []


def test_failing_observer_does_not_block_others():
    state = OnboardingState()
    changes = []

    def broken(name):
        raise RuntimeError("binding failed")

    state.subscribe(broken)
    state.subscribe(changes.append)

    state.set_error("500")

    assert "status" in changes


def test_discovered_servers_deduplicated():
    state = OnboardingState()
    server = DiscoveredServer("http://10.0.0.2:8096", "1", "den")

    state.add_discovered_server(server)
    state.add_discovered_server(DiscoveredServer("http://10.0.0.3:8096", "1", "den"))

    assert state.discovered_servers == [server]

    state.clear_discovered_servers()
    assert state.discovered_servers == []
