#!/usr/bin/env python3
"""
PokerRoom - Server Startup Script

Usage:
    python run.py [--host HOST] [--port PORT] [--next-hand-delay SECONDS] [--log-level LEVEL]

Defaults come from POKERROOM_* environment variables.
"""

import argparse
import uvicorn

from pokerroom.server.app import create_app
from pokerroom.server.config import ServerConfig


def main():
    config = ServerConfig.from_env()

    parser = argparse.ArgumentParser(description="PokerRoom Server")
    parser.add_argument("--host", default=config.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=config.port, help="Port to bind to")
    parser.add_argument(
        "--next-hand-delay", type=float, default=config.next_hand_delay,
        help="Seconds between showdown and table reset",
    )
    parser.add_argument("--log-level", default=config.log_level, help="Logging level")
    args = parser.parse_args()

    if args.next_hand_delay < 0:
        parser.error("--next-hand-delay cannot be negative")

    config.host = args.host
    config.port = args.port
    config.next_hand_delay = args.next_hand_delay
    config.log_level = args.log_level.upper()

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
