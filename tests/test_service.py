import threading
import time

from jellyfin_onboarding.discovery.listener import BroadcastListener
from jellyfin_onboarding.discovery.service import DiscoveryService

from .helpers import announcement


def make_service(port, targets, **kwargs):
    return DiscoveryService(
        port=port,
        receive_timeout=5.0,
        poll_interval=0.05,
        targets_provider=lambda: list(targets),
        **kwargs,
    )


class TestDiscoveryService:

    def test_duplicate_replies_are_merged(self, fake_server_factory):
        server = fake_server_factory([
            announcement(server_id="a", name="den"),
            announcement(server_id="a", name="den", address="http://10.9.9.9:8096"),
            announcement(server_id="b", name="attic"),
        ])
        found = []
        both_found = threading.Event()

        def on_server_discovered(record):
            found.append(record)
            if len(found) == 2:
                both_found.set()

        service = make_service(
            server.port,
            ["127.0.0.1", "127.0.0.1", "127.0.0.1"],
            on_server_discovered=on_server_discovered,
        )
        with service:
            service.start()
            assert both_found.wait(2.0)
            # Let the remaining listeners deliver their copies too
            deadline = time.monotonic() + 2.0
            while len(server.queries) < 3 and time.monotonic() < deadline:
                time.sleep(0.01)
            time.sleep(0.1)

            servers = service.servers.snapshot()

        assert [s.id for s in servers] == ["a", "b"]
        assert servers[0].address == "http://192.168.1.20:8096"
        assert [s.id for s in found] == [s.id for s in servers]

    def test_malformed_reply_not_listed(self, fake_server_factory):
        server = fake_server_factory([b"{not json", announcement(server_id="ok")])
        got_one = threading.Event()

        service = make_service(
            server.port, ["127.0.0.1"], on_server_discovered=lambda record: got_one.set()
        )
        with service:
            service.start()
            assert got_one.wait(2.0)

        assert [s.id for s in service.servers] == ["ok"]

    def test_stop_releases_every_listener(self, fake_server_factory):
        server = fake_server_factory([])
        service = make_service(server.port, ["127.0.0.1", "127.0.0.1"])

        service.start()
        listeners = list(service._listeners)
        assert service.is_running
        assert service.listener_count == 2

        started = time.monotonic()
        service.stop()

        assert time.monotonic() - started < 1.0
        assert not service.is_running
        assert service.listener_count == 0
        assert all(listener.is_closed for listener in listeners)
        assert not any(listener.is_alive for listener in listeners)

    def test_start_while_running_is_a_no_op(self, fake_server_factory):
        server = fake_server_factory([])
        calls = []

        def targets():
            calls.append(1)
            return ["127.0.0.1"]

        service = DiscoveryService(port=server.port, poll_interval=0.05, targets_provider=targets)
        with service:
            service.start()
            service.start()

            assert len(calls) == 1
            assert len(service._listeners) == 1

    def test_restart_clears_results(self, fake_server_factory):
        server = fake_server_factory([announcement(server_id="x")])
        got_one = threading.Event()
        service = make_service(
            server.port, ["127.0.0.1"], on_server_discovered=lambda record: got_one.set()
        )

        service.start()
        assert got_one.wait(2.0)
        service.stop()
        assert len(service.servers) == 1

        server.replies = []
        service.start()
        try:
            assert len(service.servers) == 0
        finally:
            service.stop()

    def test_stop_without_start(self):
        service = DiscoveryService(targets_provider=lambda: [])

        service.stop()
        service.stop()

        assert not service.is_running

    def test_stop_after_listener_died(self, mocker):
        fake_sock = mocker.MagicMock()
        fake_sock.sendto.side_effect = OSError("Network is unreachable")
        mocker.patch.object(BroadcastListener, "_create_socket", return_value=fake_sock)

        service = DiscoveryService(poll_interval=0.05, targets_provider=lambda: ["10.0.0.255"])
        service.start()
        listener = service._listeners[0]
        assert listener.join(1.0)

        service.stop()

        assert not service.is_running
        fake_sock.close.assert_called_once()

    def test_socket_failure_does_not_abort_start(self, mocker, fake_server_factory):
        server = fake_server_factory([])
        real_create = BroadcastListener._create_socket

        def create_socket(listener):
            if listener.broadcast_address == "10.0.0.255":
                raise OSError("Cannot assign requested address")
            return real_create(listener)

        mocker.patch.object(BroadcastListener, "_create_socket", autospec=True, side_effect=create_socket)

        service = make_service(server.port, ["10.0.0.255", "127.0.0.1"])
        with service:
            service.start()

            assert [listener.broadcast_address for listener in service._listeners] == ["127.0.0.1"]

    def test_callback_error_does_not_stop_aggregation(self, fake_server_factory):
        server = fake_server_factory([announcement(server_id="a"), announcement(server_id="b")])
        seen = []
        both_seen = threading.Event()

        def on_server_discovered(record):
            seen.append(record.id)
            if len(seen) == 2:
                both_seen.set()
            raise RuntimeError("observer broke")

        service = make_service(server.port, ["127.0.0.1"], on_server_discovered=on_server_discovered)
        with service:
            service.start()
            assert both_seen.wait(2.0)

        assert seen == ["a", "b"]

    def test_wait_for_returns_snapshot(self, mocker):
        mocker.patch("jellyfin_onboarding.discovery.service.time.sleep")
        service = DiscoveryService(targets_provider=lambda: [])

        assert service.wait_for(3.0) == []
