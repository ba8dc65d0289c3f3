from __future__ import annotations

import argparse
import sys

from . import __version__
from .constants import DEFAULT_DST_PORT, DEFAULT_SRC_PORT, PROG
from .errors import FatalError
from .log import RelayLog, setup_logging
from .net import Endpoint
from .relay import run_relay


def port(value: str) -> int:
    try:
        n = int(value, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from None
    if not 1 <= n <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {n}")
    return n


def host(value: str) -> str:
    if not value:
        raise argparse.ArgumentTypeError("host name must not be empty")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=PROG,
        description="A helper to send data from a dump1090 instance to another instance.",
    )
    p.add_argument("-v", action="version", version=f"{PROG} {__version__}", help="show version and exit")
    p.add_argument("-l", dest="syslog", action="store_true", help="send output messages to syslog")
    p.add_argument(
        "-s",
        dest="src_port",
        metavar="SRC_PORT",
        type=port,
        default=DEFAULT_SRC_PORT,
        help=f"source instance port. defaults to {DEFAULT_SRC_PORT}",
    )
    p.add_argument(
        "-d",
        dest="dst_port",
        metavar="DST_PORT",
        type=port,
        default=DEFAULT_DST_PORT,
        help=f"destination instance port. defaults to {DEFAULT_DST_PORT}",
    )
    p.add_argument("src_host", metavar="SRC_HOST", type=host, help="source instance host name")
    p.add_argument("dst_host", metavar="DST_HOST", type=host, help="destination instance host name")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        logger = setup_logging(use_syslog=args.syslog)
    except OSError as e:
        print(f"error: failed to open syslog: {e}", file=sys.stderr)
        return 1
    log = RelayLog(logger)

    source = Endpoint(args.src_host, args.src_port)
    destination = Endpoint(args.dst_host, args.dst_port)

    try:
        run_relay(source, destination, log)
    except FatalError as e:
        log.fatal(str(e), e.exit_code)
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
