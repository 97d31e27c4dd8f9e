"""
PokerRoom Core - Pure Python Texas Hold'em Game Logic

This module contains all game logic without any network dependencies.
"""

from pokerroom.core.card import Card, Deck, Rank, Suit
from pokerroom.core.player import Player
from pokerroom.core.hand import HandRank, HandResult, evaluate, compare_hands
from pokerroom.core.rules import GamePhase, ActionType
from pokerroom.core.engine import PokerEngine, GameState, ActionResult, WinnerResult
from pokerroom.core.session import SessionManager, Room, RoomInfo, HandUpdate
from pokerroom.core.errors import (
    PokerError, ValidationError, StateError, RuleViolation, ResourceExhaustion,
)

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "Player",
    "HandRank",
    "HandResult",
    "evaluate",
    "compare_hands",
    "GamePhase",
    "ActionType",
    "PokerEngine",
    "GameState",
    "ActionResult",
    "WinnerResult",
    "SessionManager",
    "Room",
    "RoomInfo",
    "HandUpdate",
    "PokerError",
    "ValidationError",
    "StateError",
    "RuleViolation",
    "ResourceExhaustion",
]
