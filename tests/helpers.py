"""Shared test helpers."""

import json
import socket
import threading


def announcement(
    server_id: str = "4f1a9c",
    name: str = "living-room",
    address: str = "http://192.168.1.20:8096",
) -> bytes:
    return json.dumps({
        "Address": address,
        "Id": server_id,
        "Name": name,
        "EndpointAddress": None,
    }).encode("utf-8")


class FakeServer:
    """Loopback UDP responder that answers every query with fixed replies."""

    def __init__(self, replies: list[bytes]):
        self.replies = replies
        self.queries: list[tuple[bytes, tuple]] = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(0.05)
        self.port = self.sock.getsockname()[1]
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self) -> "FakeServer":
        self._thread.start()
        return self

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                data, addr = self.sock.recvfrom(1024)
            except socket.timeout:
                continue
            except OSError:
                return
            self.queries.append((data, addr))
            for reply in self.replies:
                self.sock.sendto(reply, addr)

    def close(self) -> None:
        self._stop.set()
        self._thread.join(1.0)
        self.sock.close()
