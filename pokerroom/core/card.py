"""
Card and Deck classes for Texas Hold'em.

Ranks carry their poker value (2..14, Ace high) so that tie-break vectors
can be built straight from card ranks. The deck shuffles with an injected
random source: production uses the operating system's entropy pool, tests
pass a seeded ``random.Random``.
"""

from __future__ import annotations
import random
from dataclasses import dataclass
from typing import List, Optional
from enum import IntEnum

from pokerroom.core.errors import DeckExhaustedError


class Suit(IntEnum):
    """Card suits."""
    CLUBS = 0     # ♣
    DIAMONDS = 1  # ♦
    HEARTS = 2    # ♥
    SPADES = 3    # ♠


class Rank(IntEnum):
    """Card ranks valued 2 (lowest) to 14 (Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


# String mappings
SUIT_SYMBOLS = {
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
    Suit.SPADES: "♠",
}

SUIT_CHARS = {
    Suit.CLUBS: "c",
    Suit.DIAMONDS: "d",
    Suit.HEARTS: "h",
    Suit.SPADES: "s",
}

SUIT_NAMES = {
    Suit.CLUBS: "clubs",
    Suit.DIAMONDS: "diamonds",
    Suit.HEARTS: "hearts",
    Suit.SPADES: "spades",
}

RANK_CHARS = {
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "T",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}

# Labels shown to clients ("10" rather than "T")
RANK_LABELS = {**RANK_CHARS, Rank.TEN: "10"}

# Reverse mappings
CHAR_TO_RANK = {v: k for k, v in RANK_CHARS.items()}
CHAR_TO_SUIT = {v: k for k, v in SUIT_CHARS.items()}
SYMBOL_TO_SUIT = {v: k for k, v in SUIT_SYMBOLS.items()}


@dataclass(frozen=True)
class Card:
    """
    An immutable playing card.

    Cards can be created from:
    - Rank and Suit enums: Card(Rank.ACE, Suit.SPADES)
    - String notation: Card.from_string("As"), Card.from_string("10♥")
    """

    rank: Rank
    suit: Suit

    def __post_init__(self):
        # Coerce plain ints so Card(14, 3) == Card(Rank.ACE, Suit.SPADES)
        object.__setattr__(self, "rank", Rank(self.rank))
        object.__setattr__(self, "suit", Suit(self.suit))

    @classmethod
    def from_string(cls, s: str) -> Card:
        """
        Create a card from string notation.

        Accepts formats:
        - "As", "Kh", "Td", "2c" (rank + suit char)
        - "10s" (two-digit ten)
        - "A♠", "K♥", "10♦" (rank + suit symbol)
        """
        s = s.strip()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        if s.startswith("10"):
            rank_char, suit_part = "T", s[2:]
        else:
            rank_char, suit_part = s[0].upper(), s[1:]

        if rank_char not in CHAR_TO_RANK:
            raise ValueError(f"Invalid rank: {rank_char}")
        rank = CHAR_TO_RANK[rank_char]

        # Try suit char first, then symbol
        if suit_part.lower() in CHAR_TO_SUIT:
            suit = CHAR_TO_SUIT[suit_part.lower()]
        elif suit_part in SYMBOL_TO_SUIT:
            suit = SYMBOL_TO_SUIT[suit_part]
        else:
            raise ValueError(f"Invalid suit: {suit_part}")

        return cls(rank, suit)

    def __repr__(self) -> str:
        return f"Card({self.short_str})"

    def __str__(self) -> str:
        return f"{RANK_LABELS[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    @property
    def short_str(self) -> str:
        """Short string like 'As', 'Th'."""
        return f"{RANK_CHARS[self.rank]}{SUIT_CHARS[self.suit]}"

    @property
    def color(self) -> str:
        """Return 'red' for hearts/diamonds, 'black' for clubs/spades."""
        return "red" if self.suit in (Suit.HEARTS, Suit.DIAMONDS) else "black"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "rank": RANK_LABELS[self.rank],
            "suit": SUIT_NAMES[self.suit],
            "text": str(self),
            "color": self.color,
        }


def full_deck() -> List[Card]:
    """All 52 cards in suit-major order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Deck:
    """
    A standard 52-card deck.

    Usage:
        deck = Deck(rng=random.Random(7))
        hole_cards = deck.deal(2)
        flop = deck.deal(3)
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize a full, shuffled deck.

        Args:
            rng: Random source used for shuffling. Defaults to
                random.SystemRandom().
        """
        self._rng = rng if rng is not None else random.SystemRandom()
        self.reset()

    def reset(self) -> None:
        """Rebuild the full 52 cards and shuffle them."""
        self._cards: List[Card] = full_deck()
        self._dealt: List[Card] = []
        self.shuffle()

    def shuffle(self) -> None:
        """Fisher-Yates shuffle of the undealt cards."""
        cards = self._cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]

    def deal(self, n: int = 1) -> List[Card]:
        """
        Deal n cards from the top of the deck.

        Raises:
            DeckExhaustedError: If not enough cards remain.
        """
        if n < 0:
            raise ValueError(f"Cannot deal a negative number of cards: {n}")
        if n > len(self._cards):
            raise DeckExhaustedError(n, len(self._cards))

        dealt = self._cards[:n]
        del self._cards[:n]
        self._dealt.extend(dealt)
        return dealt

    def deal_one(self) -> Card:
        """Deal a single card."""
        return self.deal(1)[0]

    @property
    def remaining(self) -> int:
        """Number of cards remaining in the deck."""
        return len(self._cards)

    @property
    def dealt_cards(self) -> List[Card]:
        """List of cards that have been dealt."""
        return self._dealt.copy()

    def __len__(self) -> int:
        return len(self._cards)

    def __repr__(self) -> str:
        return f"Deck({self.remaining} cards remaining)"


def parse_cards(cards_str: str) -> List[Card]:
    """
    Parse space-separated cards, e.g. "As Kh 10d" or "A♠ K♥ T♦".
    """
    return [Card.from_string(s) for s in cards_str.split()]
