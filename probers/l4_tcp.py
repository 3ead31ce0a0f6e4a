"""
TCP connect prober using a plain connect() plus a passive banner read.
No raw packets; a single attempt per port is final.
"""

import socket
import time
from typing import Callable, Optional, Tuple

from core.config import settings
from core.models import Probe, ScanResult

Dialer = Callable[[Tuple[str, int], float], socket.socket]


def default_dialer(address: Tuple[str, int], timeout: float) -> socket.socket:
    """
    Try each resolved address in turn under one shared deadline, so a
    multi-homed host costs at most `timeout` in total, not per address.
    """
    host, port = address
    deadline = time.monotonic() + timeout
    last_err: Optional[OSError] = None
    for family, type_, proto, _, sockaddr in socket.getaddrinfo(host, port, type=socket.SOCK_STREAM):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise socket.timeout(f"connect to {host}:{port} timed out")
        sock = socket.socket(family, type_, proto)
        try:
            sock.settimeout(remaining)
            sock.connect(sockaddr)
            return sock
        except OSError as exc:
            sock.close()
            last_err = exc
    if last_err is not None:
        raise last_err
    raise OSError(f"no addresses for {host}:{port}")


def read_banner(sock: socket.socket, timeout: float, size: Optional[int] = None) -> Optional[str]:
    """
    Read whatever the peer sends first. Timeout, reset and a zero-byte EOF all
    mean "no banner"; they are not told apart.
    """
    sock.settimeout(timeout)
    try:
        data = sock.recv(size or settings.banner_read_size)
    except OSError:
        return None
    banner = data.decode(errors="ignore").strip()
    return banner or None


def tcp_probe(probe: Probe, timeout: float, dialer: Optional[Dialer] = None) -> ScanResult:
    dial = dialer or default_dialer
    try:
        sock = dial(probe.address, timeout)
    except (OSError, ValueError):
        # refused, timed out, unreachable, unresolvable or malformed host
        return ScanResult.closed(probe)
    with sock:
        banner = read_banner(sock, timeout)
    return ScanResult(target=probe.target, port=probe.port, open=True, banner=banner)
