from __future__ import annotations

import socket
import time
from dataclasses import dataclass
from typing import Callable, List, Tuple

from .constants import RETRY_SLEEP_S, SOCKET_TIMEOUT_S
from .errors import FatalError
from .log import RelayLog

Resolver = Callable[[str], Tuple[str, List[str], List[str]]]


def _tcp_socket() -> socket.socket:
    return socket.socket(socket.AF_INET, socket.SOCK_STREAM)


@dataclass(frozen=True, slots=True)
class Endpoint:
    host: str
    port: int

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("host must not be empty")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class TcpConnection:
    def __init__(self, sock: socket.socket, endpoint: Endpoint):
        self.sock = sock
        self.endpoint = endpoint

    def recv_into(self, buffer: bytearray | memoryview) -> int:
        return self.sock.recv_into(buffer)

    def sendall(self, data: bytes | memoryview) -> None:
        self.sock.sendall(data)

    def close(self) -> None:
        self.sock.close()


@dataclass(slots=True)
class Connector:
    """Opens connections, retrying transient failures forever.

    Socket allocation and connect failures are logged and retried every
    ``retry_s`` seconds. Timeout configuration and hostname resolution
    failures raise :class:`FatalError` instead.
    """

    log: RelayLog
    timeout_s: float = SOCKET_TIMEOUT_S
    retry_s: float = RETRY_SLEEP_S
    socket_factory: Callable[[], socket.socket] = _tcp_socket
    resolver: Resolver = socket.gethostbyname_ex
    sleep: Callable[[float], None] = time.sleep

    def connect(self, endpoint: Endpoint) -> TcpConnection:
        address: str | None = None
        while True:
            sock = self._allocate(endpoint)
            try:
                self._configure(sock, endpoint)
                if address is None:
                    address = self._resolve(endpoint)
            except FatalError:
                sock.close()
                raise

            try:
                sock.connect((address, endpoint.port))
            except OSError as e:
                sock.close()
                self.log.warn(f"Failed to connect to {endpoint}, retrying: {_reason(e)}")
                self.sleep(self.retry_s)
                continue

            return TcpConnection(sock, endpoint)

    def _allocate(self, endpoint: Endpoint) -> socket.socket:
        while True:
            try:
                return self.socket_factory()
            except OSError as e:
                self.log.warn(f"Failed to create socket for {endpoint}, retrying: {_reason(e)}")
                self.sleep(self.retry_s)

    def _configure(self, sock: socket.socket, endpoint: Endpoint) -> None:
        # one timeout bounds connect, reads and writes alike
        try:
            sock.settimeout(self.timeout_s)
        except (OSError, ValueError) as e:
            raise FatalError(f"Failed to set socket timeout for {endpoint}: {_reason(e)}") from e

    def _resolve(self, endpoint: Endpoint) -> str:
        try:
            _, _, addresses = self.resolver(endpoint.host)
        except (OSError, UnicodeError) as e:
            raise FatalError(f"Failed to parse hostname for {endpoint.host}: {_reason(e)}") from e

        if not addresses:
            raise FatalError(f"Can't find any IPv4 address for {endpoint.host}")
        if len(addresses) > 1:
            self.log.warn(
                "Hostname with more than one IPv4 address, "
                f"using the first one detected: {addresses[0]}"
            )
        return addresses[0]


def _reason(e: BaseException) -> str:
    if isinstance(e, OSError) and e.strerror:
        return e.strerror
    return str(e) or e.__class__.__name__
