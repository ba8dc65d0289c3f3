from __future__ import annotations

from dataclasses import dataclass, field

from .constants import BUFFER_SIZE
from .log import RelayLog
from .net import Connector, Endpoint, TcpConnection


@dataclass(slots=True)
class RelayMetrics:
    bytes_read: int = 0
    bytes_written: int = 0
    bytes_dropped: int = 0
    source_reconnects: int = 0
    destination_reconnects: int = 0


@dataclass(slots=True)
class Forwarder:
    """Copies bytes from ``source`` to ``destination`` until the process dies.

    A failed read reconnects the source and skips the write. A failed write
    reconnects the destination and drops the chunk that was being written;
    nothing is buffered across a reconnect.
    """

    connector: Connector
    source: Endpoint
    destination: Endpoint
    log: RelayLog
    chunk_size: int = BUFFER_SIZE
    metrics: RelayMetrics = field(default_factory=RelayMetrics)
    buffer: bytearray = field(init=False)
    src: TcpConnection | None = field(default=None, init=False)
    dst: TcpConnection | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {self.chunk_size}")
        self.buffer = bytearray(self.chunk_size)

    def start(self) -> None:
        # destination first: never read bytes with nowhere to send them
        if self.dst is None:
            self.dst = self.connector.connect(self.destination)
        if self.src is None:
            self.src = self.connector.connect(self.source)

    def run(self) -> None:
        self.start()
        while True:
            self.step()

    def step(self) -> int:
        """Move one chunk; returns the number of bytes delivered."""
        assert self.src is not None and self.dst is not None, "start() not called"

        n = self._read()
        if n <= 0:
            self.src.close()
            self.src = self.connector.connect(self.source)
            self.metrics.source_reconnects += 1
            return 0
        self.metrics.bytes_read += n

        if not self._write(n):
            self.metrics.bytes_dropped += n
            self.dst.close()
            self.dst = self.connector.connect(self.destination)
            self.metrics.destination_reconnects += 1
            return 0
        self.metrics.bytes_written += n
        return n

    def close(self) -> None:
        for conn in (self.src, self.dst):
            if conn is None:
                continue
            try:
                conn.close()
            except OSError as e:
                self.log.warn(f"Failed to close connection to {conn.endpoint}: {e}")
        self.src = None
        self.dst = None

    def _read(self) -> int:
        assert self.src is not None
        try:
            n = self.src.recv_into(self.buffer)
        except TimeoutError:
            self.log.warn(f"Timed out reading from {self.source}, reconnecting")
            return 0
        except OSError as e:
            self.log.warn(f"Failed to read from {self.source}, reconnecting: {e}")
            return 0
        if n <= 0:
            self.log.warn(f"Connection closed by {self.source}, reconnecting")
        return n

    def _write(self, n: int) -> bool:
        assert self.dst is not None
        try:
            self.dst.sendall(memoryview(self.buffer)[:n])
        except TimeoutError:
            self.log.warn(f"Timed out writing to {self.destination}, reconnecting, {n} bytes dropped")
            return False
        except OSError as e:
            self.log.warn(f"Failed to write to {self.destination}, reconnecting, {n} bytes dropped: {e}")
            return False
        return True


def run_relay(
    source: Endpoint,
    destination: Endpoint,
    log: RelayLog,
    connector: Connector | None = None,
) -> None:
    fwd = Forwarder(connector or Connector(log), source, destination, log)
    try:
        fwd.run()
    finally:
        fwd.close()
