import socket
import threading
from typing import List, Optional

import pytest


class Listener:
    """Loopback TCP server that optionally writes a greeting on accept."""

    def __init__(self, greeting: bytes = b"", close_on_accept: bool = False):
        self.greeting = greeting
        self.close_on_accept = close_on_accept
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(64)
        self.sock.settimeout(0.1)
        self.port = self.sock.getsockname()[1]
        self._conns: List[socket.socket] = []
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            if self.greeting:
                conn.sendall(self.greeting)
            if self.close_on_accept:
                conn.close()
            else:
                self._conns.append(conn)

    def stop(self):
        self._stop.set()
        self._thread.join(timeout=2)
        for conn in self._conns:
            conn.close()
        self.sock.close()


@pytest.fixture
def listener():
    started: List[Listener] = []

    def _start(greeting: bytes = b"", close_on_accept: bool = False) -> Listener:
        srv = Listener(greeting=greeting, close_on_accept=close_on_accept)
        started.append(srv)
        return srv

    yield _start
    for srv in started:
        srv.stop()


@pytest.fixture
def closed_port() -> int:
    # bound then released without listen(): connects get refused
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def refusing_dialer(address, timeout):
    raise ConnectionRefusedError(f"refused {address[0]}:{address[1]}")


@pytest.fixture
def refused():
    return refusing_dialer


def routing_dialer(routes: dict, default: Optional[int] = None):
    """Dial a real loopback port for ports listed in routes; refuse the rest."""

    def _dial(address, timeout):
        local = routes.get(address[1], default)
        if local is None:
            raise ConnectionRefusedError(f"refused {address[0]}:{address[1]}")
        return socket.create_connection(("127.0.0.1", local), timeout=timeout)

    return _dial


@pytest.fixture
def router():
    return routing_dialer
