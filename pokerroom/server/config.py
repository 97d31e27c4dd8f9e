"""
Server settings.

Values come from POKERROOM_* environment variables; run.py overrides them
from the command line.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from pokerroom.core.rules import NEXT_HAND_DELAY_SECONDS


@dataclass
class ServerConfig:
    """Transport settings."""
    host: str = "0.0.0.0"
    port: int = 8000
    next_hand_delay: float = NEXT_HAND_DELAY_SECONDS
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
        env = os.environ if environ is None else environ
        config = cls()

        if "POKERROOM_HOST" in env:
            config.host = env["POKERROOM_HOST"]
        if "POKERROOM_PORT" in env:
            config.port = int(env["POKERROOM_PORT"])
        if "POKERROOM_NEXT_HAND_DELAY" in env:
            config.next_hand_delay = float(env["POKERROOM_NEXT_HAND_DELAY"])
        if "POKERROOM_CORS_ORIGINS" in env:
            config.cors_origins = [
                o.strip() for o in env["POKERROOM_CORS_ORIGINS"].split(",") if o.strip()
            ]
        if "POKERROOM_LOG_LEVEL" in env:
            config.log_level = env["POKERROOM_LOG_LEVEL"].upper()

        if config.next_hand_delay < 0:
            raise ValueError("next_hand_delay cannot be negative")
        return config
