import pytest

from .helpers import FakeServer


@pytest.fixture
def fake_server_factory():
    servers: list[FakeServer] = []

    def factory(replies: list[bytes]) -> FakeServer:
        server = FakeServer(replies).start()
        servers.append(server)
        return server

    yield factory

    for server in servers:
        server.close()
