# ABOUTME: Ephemeral resources for one session: a scoped temp dir and a free port.
# ABOUTME: The temp dir is removed on every exit path; the port is not reserved.

from __future__ import annotations

import socket
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, TypeVar

T = TypeVar("T")

TEMP_PREFIX = "ob-ghci"
LOOPBACK = "127.0.0.1"


@contextmanager
def temporary_directory(prefix: str = TEMP_PREFIX) -> Iterator[Path]:
    with tempfile.TemporaryDirectory(prefix=prefix) as directory:
        yield Path(directory)


def with_temp_directory(action: Callable[[Path], T], prefix: str = TEMP_PREFIX) -> T:
    with temporary_directory(prefix) as directory:
        return action(directory)


def get_free_port(host: str = LOOPBACK) -> int:
    """Ask the OS for an unused port.

    The socket is closed before returning, so another process may claim the
    port before the caller binds it.
    """
    family, kind, proto, _, address = socket.getaddrinfo(
        host, 0, type=socket.SOCK_STREAM, flags=socket.AI_NUMERICHOST
    )[0]
    with socket.socket(family, kind, proto) as sock:
        sock.bind(address)
        return sock.getsockname()[1]
