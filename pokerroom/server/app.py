"""
FastAPI Application Entry Point for PokerRoom.

This module creates and configures the FastAPI application with:
- HTTP routes for the room lobby
- WebSocket endpoint for real-time play
- CORS middleware for browser clients
"""

from typing import Optional
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pokerroom import __version__
from pokerroom.core.session import SessionManager
from pokerroom.server.config import ServerConfig
from pokerroom.server.routes import router
from pokerroom.server.websocket import ConnectionManager, websocket_endpoint

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_app(
    config: Optional[ServerConfig] = None,
    manager: Optional[SessionManager] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Server settings (default: read from the environment)
        manager: Room registry to serve (default: a fresh SessionManager)

    Returns:
        Configured FastAPI application instance
    """
    config = config if config is not None else ServerConfig.from_env()
    manager = manager if manager is not None else SessionManager()
    configure_logging(config.log_level)

    app = FastAPI(
        title="PokerRoom",
        description="Multiplayer Texas Hold'em rooms with a WebSocket API",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.manager = manager
    app.state.hub = ConnectionManager(manager, config)

    # Include HTTP routes
    app.include_router(router)

    # WebSocket endpoint
    app.websocket("/ws")(websocket_endpoint)

    logger.info(f"PokerRoom app created (next hand delay {config.next_hand_delay}s)")
    return app


# Create the application instance
app = create_app()


def main():
    """Run the server (for use as entry point)."""
    import uvicorn
    config = ServerConfig.from_env()
    uvicorn.run(
        "pokerroom.server.app:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
