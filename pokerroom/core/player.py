"""
Player class for Texas Hold'em.

Manages player state including:
- Chip count (persists across hands through the room)
- Hole cards
- Bet in the current betting round and in the whole hand
- Folded / all-in flags and whether the player has acted this round
"""

from __future__ import annotations
from typing import List, Dict, Any
from dataclasses import dataclass, field

from pokerroom.core.card import Card


@dataclass
class Player:
    """
    A player seated at a table.

    Attributes:
        player_id: Unique identifier for the player
        name: Display name
        chips: Current chip count
        position: Seat position at the table (0-indexed, unique per room)
        cards: The player's private cards (0 or 2)
        current_bet: Amount bet in the current betting round
        total_bet_in_round: Total amount bet in the current hand
        is_folded: Has folded this hand
        is_all_in: Has committed the whole stack this hand
        has_acted_this_round: Has acted since the last full bet was made
        is_connected: Transport connection is alive
    """
    player_id: str
    name: str
    chips: int
    position: int = 0
    cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_bet_in_round: int = 0
    is_folded: bool = False
    is_all_in: bool = False
    has_acted_this_round: bool = False
    is_connected: bool = True

    def __post_init__(self):
        if self.chips < 0:
            raise ValueError(f"Chips cannot be negative: {self.chips}")

    def reset_for_new_hand(self) -> None:
        """Clear all per-hand fields. Chips are kept."""
        self.cards = []
        self.current_bet = 0
        self.total_bet_in_round = 0
        self.is_folded = False
        self.is_all_in = False
        self.has_acted_this_round = False

    def reset_for_new_round(self) -> None:
        """Reset state for a new betting round (flop, turn, river)."""
        self.current_bet = 0
        self.has_acted_this_round = False

    def bet(self, amount: int) -> int:
        """
        Move chips from the stack into the current bet.

        Args:
            amount: Amount to bet; capped at the stack

        Returns:
            Actual amount bet
        """
        if amount <= 0:
            return 0

        actual = min(amount, self.chips)
        self.chips -= actual
        self.current_bet += actual
        self.total_bet_in_round += actual

        if self.chips == 0:
            self.is_all_in = True

        return actual

    def fold(self) -> None:
        self.is_folded = True

    @property
    def can_act(self) -> bool:
        """Neither folded nor all-in."""
        return not self.is_folded and not self.is_all_in

    @property
    def is_in_hand(self) -> bool:
        """Still contesting the pot (all-in players included)."""
        return not self.is_folded

    def copy(self) -> Player:
        """Value copy; the card list is not shared."""
        return Player(
            player_id=self.player_id,
            name=self.name,
            chips=self.chips,
            position=self.position,
            cards=list(self.cards),
            current_bet=self.current_bet,
            total_bet_in_round=self.total_bet_in_round,
            is_folded=self.is_folded,
            is_all_in=self.is_all_in,
            has_acted_this_round=self.has_acted_this_round,
            is_connected=self.is_connected,
        )

    def to_dict(self, hide_cards: bool = True) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Args:
            hide_cards: If True, send an empty card list
        """
        return {
            "id": self.player_id,
            "name": self.name,
            "chips": self.chips,
            "position": self.position,
            "cards": [] if hide_cards else [c.to_dict() for c in self.cards],
            "current_bet": self.current_bet,
            "total_bet_in_round": self.total_bet_in_round,
            "is_folded": self.is_folded,
            "is_all_in": self.is_all_in,
            "has_acted_this_round": self.has_acted_this_round,
            "is_connected": self.is_connected,
        }

    def __repr__(self) -> str:
        return (
            f"Player({self.player_id}, chips={self.chips}, "
            f"bet={self.current_bet}, folded={self.is_folded}, "
            f"all_in={self.is_all_in})"
        )
