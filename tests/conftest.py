import socket
import threading

import pytest


@pytest.fixture
def greeting_server():
    """Loopback listener that sends a fixed greeting to each client, then hangs up."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    srv.bind(("127.0.0.1", 0))
    srv.listen(8)
    srv.settimeout(5)
    greeting = {"data": b"SSH-2.0-OpenSSH_8.9\r\n"}
    stop = threading.Event()

    def serve():
        while not stop.is_set():
            try:
                conn, _ = srv.accept()
            except OSError:
                return
            with conn:
                conn.sendall(greeting["data"])

    t = threading.Thread(target=serve, daemon=True)
    t.start()
    yield srv.getsockname()[1], greeting
    stop.set()
    srv.close()
    t.join(timeout=5)


@pytest.fixture
def silent_server():
    """Listener that never accepts; connects complete via the backlog, no data follows."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(8)
    yield srv.getsockname()[1]
    srv.close()


@pytest.fixture
def closed_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
