"""
TravelMemory Backend — Command Line Entry Point
================================================

Usage:
    python -m travel_memory [--host HOST] [--port PORT] [--mongo-uri URI] [--log-level LEVEL]
    travel-memory ...                (console script, same flags)

Flags override the matching environment variables (HOST, PORT, MONGO_URI,
LOG_LEVEL), which override the built-in defaults.
"""

import argparse
from typing import List, Optional

from travel_memory import __version__
from travel_memory.config import Settings, get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="travel-memory",
        description="TravelMemory backend: trip CRUD over MongoDB with Prometheus metrics",
    )
    parser.add_argument("--host", help="Listen address (env HOST, default 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Listen port (env PORT, default 3001)")
    parser.add_argument("--mongo-uri", help="MongoDB connection string (env MONGO_URI)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level (env LOG_LEVEL, default INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_settings(argv: Optional[List[str]] = None) -> Settings:
    args = build_parser().parse_args(argv)
    return get_settings(
        host=args.host,
        port=args.port,
        mongo_uri=args.mongo_uri,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> None:
    # Imported here so --help and --version do not pull in uvicorn
    from travel_memory.server import serve

    serve(resolve_settings(argv))


if __name__ == "__main__":
    main()
