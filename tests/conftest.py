from __future__ import annotations

import logging

import pytest

from remote_relay.log import LOGGER_NAME, RelayLog


class FakeSocket:
    def __init__(self, connect_errors: list[BaseException], timeout_error: BaseException | None = None):
        self.connect_errors = connect_errors
        self.timeout_error = timeout_error
        self.timeout: float | None = None
        self.connected_to: tuple[str, int] | None = None
        self.connect_attempts = 0
        self.closed = False

    def settimeout(self, value: float) -> None:
        if self.timeout_error is not None:
            raise self.timeout_error
        self.timeout = value

    def connect(self, addr: tuple[str, int]) -> None:
        self.connect_attempts += 1
        if self.connect_errors:
            raise self.connect_errors.pop(0)
        self.connected_to = addr

    def close(self) -> None:
        self.closed = True


class SocketFactory:
    """Hands out FakeSockets; fails allocation and connect as scripted."""

    def __init__(self, connect_errors=None, alloc_errors=None, timeout_error=None):
        self.connect_errors = list(connect_errors or [])
        self.alloc_errors = list(alloc_errors or [])
        self.timeout_error = timeout_error
        self.created: list[FakeSocket] = []

    def __call__(self) -> FakeSocket:
        if self.alloc_errors:
            raise self.alloc_errors.pop(0)
        s = FakeSocket(self.connect_errors, self.timeout_error)
        self.created.append(s)
        return s


class FakeConnection:
    """A scripted connection: each read event is bytes (b"" is a peer close) or an exception."""

    def __init__(self, endpoint, reads=None, write_errors=None):
        self.endpoint = endpoint
        self.reads = list(reads or [])
        self.write_errors = list(write_errors or [])
        self.writes: list[bytes] = []
        self.closed = False

    def recv_into(self, buffer) -> int:
        if not self.reads:
            return 0
        item = self.reads.pop(0)
        if isinstance(item, BaseException):
            raise item
        data, rest = item[: len(buffer)], item[len(buffer) :]
        if rest:
            self.reads.insert(0, rest)
        buffer[: len(data)] = data
        return len(data)

    def sendall(self, data) -> None:
        if self.write_errors:
            raise self.write_errors.pop(0)
        self.writes.append(bytes(data))

    def close(self) -> None:
        self.closed = True

    @property
    def received(self) -> bytes:
        return b"".join(self.writes)


class FakeConnector:
    """Returns queued connections per endpoint, or an idle one when the queue is empty."""

    def __init__(self):
        self.queued: dict = {}
        self.calls: list = []
        self.opened: list[FakeConnection] = []

    def queue(self, endpoint, **kwargs) -> FakeConnection:
        conn = FakeConnection(endpoint, **kwargs)
        self.queued.setdefault(endpoint, []).append(conn)
        return conn

    def connect(self, endpoint) -> FakeConnection:
        self.calls.append(endpoint)
        pending = self.queued.get(endpoint)
        conn = pending.pop(0) if pending else FakeConnection(endpoint)
        self.opened.append(conn)
        return conn


@pytest.fixture(autouse=True)
def _reset_relay_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def log() -> RelayLog:
    return RelayLog()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def socket_factory():
    return SocketFactory
