from __future__ import annotations

import logging
import logging.handlers
import os
import sys

from .constants import PROG

LOGGER_NAME = "remote_relay"
SYSLOG_SOCKET = "/dev/log"


class _ConsoleFormatter(logging.Formatter):
    """Renders records as ``warning: message`` on the console."""

    def format(self, record: logging.LogRecord) -> str:
        return f"{record.levelname.lower()}: {super().format(record)}"


def setup_logging(use_syslog: bool = False) -> logging.Logger:
    """Send the relay's log output to syslog or to stderr.

    Existing handlers are replaced, so calling this twice never duplicates lines.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    handler: logging.Handler
    if use_syslog:
        address: str | tuple[str, int] = SYSLOG_SOCKET
        if not os.path.exists(SYSLOG_SOCKET):
            address = ("localhost", logging.handlers.SYSLOG_UDP_PORT)
        handler = logging.handlers.SysLogHandler(
            address=address, facility=logging.handlers.SysLogHandler.LOG_DAEMON
        )
        handler.ident = f"{PROG}[{os.getpid()}]: "
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_ConsoleFormatter("%(message)s"))

    logger.addHandler(handler)
    logger.setLevel(logging.WARNING)
    return logger


class RelayLog:
    """The two severities the relay needs: warn and fatal."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def fatal(self, message: str, exit_code: int = 1) -> None:
        self.logger.error(message)
        raise SystemExit(exit_code)
