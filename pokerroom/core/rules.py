"""
Texas Hold'em Rules and Constants.

Table conventions used by the engine:

1. Blinds: with three or more players the small blind sits left of the
   dealer and the big blind left of the small blind. Heads-up, the dealer
   posts the small blind and the other player the big blind.

2. Preflop, the first player able to act after the big blind opens.
   Postflop, the first player able to act after the dealer opens.

3. Minimum raise: a raise must increase the bet by at least the previous
   raise size (the big blind at the start of each street). A player may
   always commit their whole stack, even for less.

4. Side pots are not modelled: the pot is one undivided total.
"""

from enum import Enum
from typing import Optional, Tuple


class GamePhase(Enum):
    """Phases of a Texas Hold'em hand, in the only order they occur."""
    WAITING = "waiting"
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"

    @property
    def order(self) -> int:
        return PHASE_ORDER.index(self)

    @property
    def is_betting(self) -> bool:
        return self in BETTING_PHASES

    def next(self) -> "GamePhase":
        """The phase following this one. Showdown is terminal."""
        if self is GamePhase.SHOWDOWN:
            return self
        return PHASE_ORDER[self.order + 1]


PHASE_ORDER = (
    GamePhase.WAITING,
    GamePhase.PREFLOP,
    GamePhase.FLOP,
    GamePhase.TURN,
    GamePhase.RIVER,
    GamePhase.SHOWDOWN,
)

BETTING_PHASES = frozenset({
    GamePhase.PREFLOP, GamePhase.FLOP, GamePhase.TURN, GamePhase.RIVER,
})


class ActionType(Enum):
    """Possible player actions (values are the wire names)."""
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"
    ALL_IN = "all-in"

    @classmethod
    def parse(cls, value) -> Optional["ActionType"]:
        """Parse an ActionType or a case-insensitive wire name; None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower().replace("_", "-")
        if key == "allin":
            key = "all-in"
        try:
            return cls(key)
        except ValueError:
            return None


# Default game settings
DEFAULT_BIG_BLIND = 20
DEFAULT_BUY_IN = 1000
DEFAULT_MAX_PLAYERS = 6
MIN_PLAYERS = 2
MAX_PLAYERS = 10

# Pause between a showdown and the room being reset for the next hand
NEXT_HAND_DELAY_SECONDS = 5.0

# Cards per phase
HOLE_CARDS = 2
FLOP_CARDS = 3
TURN_CARDS = 1
RIVER_CARDS = 1
TOTAL_COMMUNITY_CARDS = 5

# Hand evaluation
HAND_SIZE = 5  # Best 5-card hand

# Cards dealt when entering each phase
STREET_CARDS = {
    GamePhase.FLOP: FLOP_CARDS,
    GamePhase.TURN: TURN_CARDS,
    GamePhase.RIVER: RIVER_CARDS,
}


def get_blind_positions(num_players: int, dealer_position: int) -> Tuple[int, int]:
    """
    Calculate small blind and big blind positions.

    Args:
        num_players: Number of players dealt in
        dealer_position: Index of the dealer (0-indexed)

    Returns:
        Tuple of (small_blind_position, big_blind_position)
    """
    if num_players < MIN_PLAYERS:
        raise ValueError("Need at least 2 players")

    if num_players == 2:
        # Heads-up: Dealer is small blind
        sb_pos = dealer_position % num_players
        bb_pos = (dealer_position + 1) % num_players
    else:
        sb_pos = (dealer_position + 1) % num_players
        bb_pos = (dealer_position + 2) % num_players

    return sb_pos, bb_pos


def small_blind_for(big_blind: int) -> int:
    """Default small blind for a big blind: half of it."""
    return big_blind // 2
