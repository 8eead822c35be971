"""Command line entry point: python -m eth_fetcher."""

import argparse

import uvicorn

from eth_fetcher.core.config import Settings
from eth_fetcher.core.logging import configure_logging


def parse_addr(addr: str) -> tuple[str, int]:
    """Split host:port; an empty host binds all interfaces."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise argparse.ArgumentTypeError(f"invalid address {addr!r}, expected host:port")
    return host or "0.0.0.0", int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eth-fetcher",
        description="Ethereum transaction lookup and PersonInfo contract API",
    )
    parser.add_argument("--addr", type=parse_addr, help="HTTP listen address host:port")
    parser.add_argument("--dsn", help="PostgreSQL connection URL")
    parser.add_argument("--ethnode", help="Ethereum node HTTP endpoint")
    parser.add_argument("--ethsocket", help="Ethereum node WebSocket endpoint")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings with command line overrides applied."""
    overrides = {}
    if args.addr:
        overrides["api_host"], overrides["api_port"] = args.addr
    if args.dsn:
        overrides["db_connection_url"] = args.dsn
    if args.ethnode:
        overrides["eth_node_url"] = args.ethnode
    if args.ethsocket:
        overrides["eth_socket_url"] = args.ethsocket
    return Settings(**overrides)


def main(argv: list[str] | None = None) -> None:
    """Parse flags and serve the API."""
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    configure_logging(settings)

    from eth_fetcher.main import create_app

    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
