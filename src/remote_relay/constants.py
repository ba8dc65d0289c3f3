from __future__ import annotations

PROG = "remote-relay"

BUFFER_SIZE = 1024  # bytes moved per read/write cycle
SOCKET_TIMEOUT_S = 5.0
RETRY_SLEEP_S = 1.0

DEFAULT_SRC_PORT = 30002  # dump1090 raw output
DEFAULT_DST_PORT = 30001  # dump1090 raw input
