"""
PokerRoom - Multiplayer Texas Hold'em Rooms

- Pure Python betting state machine and hand evaluator
- Room registry that runs one engine per hand
- FastAPI + WebSocket transport adapter

Usage:
    from pokerroom.core import SessionManager, PokerEngine, evaluate
"""

__version__ = "0.2.0"

from pokerroom.core.card import Card, Deck
from pokerroom.core.player import Player
from pokerroom.core.engine import PokerEngine
from pokerroom.core.session import SessionManager
from pokerroom.core.hand import HandRank, evaluate

__all__ = [
    "Card",
    "Deck",
    "Player",
    "PokerEngine",
    "SessionManager",
    "HandRank",
    "evaluate",
    "__version__",
]
