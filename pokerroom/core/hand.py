"""
Hand Evaluation for Texas Hold'em.

A hand is classified into one of ten categories (the HandRank tag) plus a
tie-break vector of rank values that orders hands within a category.
Comparison is category first, then the vectors element by element.

Hand Rankings (best to worst):
10. Royal Flush: A♠ K♠ Q♠ J♠ 10♠
 9. Straight Flush: 5 consecutive cards of same suit
 8. Four of a Kind: 4 cards of same rank
 7. Full House: 3 of a kind + pair
 6. Flush: 5 cards of same suit
 5. Straight: 5 consecutive cards
 4. Three of a Kind: 3 cards of same rank
 3. Two Pair: 2 different pairs
 2. One Pair: 2 cards of same rank
 1. High Card: No made hand

Note: Ace can be low in A-2-3-4-5 straight (wheel), which is five-high.
"""

from __future__ import annotations
from typing import List, Tuple, Optional, Sequence
from dataclasses import dataclass
from enum import IntEnum
from collections import Counter

from pokerroom.core.card import Card, Rank
from pokerroom.core.combinatorics import best_subset
from pokerroom.core.rules import HAND_SIZE


class HandRank(IntEnum):
    """Hand categories, higher value = stronger hand."""
    ROYAL_FLUSH = 10
    STRAIGHT_FLUSH = 9
    FOUR_OF_A_KIND = 8
    FULL_HOUSE = 7
    FLUSH = 6
    STRAIGHT = 5
    THREE_OF_A_KIND = 4
    TWO_PAIR = 3
    ONE_PAIR = 2
    HIGH_CARD = 1


# Hand rank names for display
HAND_RANK_NAMES = {
    HandRank.ROYAL_FLUSH: "Royal Flush",
    HandRank.STRAIGHT_FLUSH: "Straight Flush",
    HandRank.FOUR_OF_A_KIND: "Four of a Kind",
    HandRank.FULL_HOUSE: "Full House",
    HandRank.FLUSH: "Flush",
    HandRank.STRAIGHT: "Straight",
    HandRank.THREE_OF_A_KIND: "Three of a Kind",
    HandRank.TWO_PAIR: "Two Pair",
    HandRank.ONE_PAIR: "One Pair",
    HandRank.HIGH_CARD: "High Card",
}

WIN_BY_FOLD = "Winner by fold"


@dataclass(frozen=True)
class HandResult:
    """
    An evaluated hand.

    Attributes:
        rank: Hand category
        tie_break: Rank values compared in order among equal categories
        cards: The five cards making the hand, ordered for display
        description: Human-readable description
    """
    rank: HandRank
    tie_break: Tuple[int, ...]
    cards: Tuple[Card, ...]
    description: str = ""

    @property
    def name(self) -> str:
        if self.description == WIN_BY_FOLD:
            return WIN_BY_FOLD
        return HAND_RANK_NAMES[self.rank]

    @property
    def strength(self) -> Tuple[int, Tuple[int, ...]]:
        """Sort key: stronger hands have larger keys."""
        return int(self.rank), self.tie_break

    @classmethod
    def winner_by_fold(cls) -> HandResult:
        """Placeholder result for a pot won without a showdown."""
        return cls(HandRank.HIGH_CARD, (), (), WIN_BY_FOLD)

    def to_dict(self) -> dict:
        return {
            "rank": int(self.rank),
            "rank_name": self.name,
            "high_cards": list(self.tie_break),
            "cards": [c.to_dict() for c in self.cards],
            "description": self.description,
        }


def evaluate(
    hole_cards: Sequence[Card],
    community_cards: Sequence[Card],
) -> HandResult:
    """
    Find the best 5-card hand from hole cards plus community cards.

    Every 5-card subset is evaluated (21 of them with a full board), so the
    result does not depend on input order.

    Raises:
        ValueError: If the combined cards are not 5-7 distinct cards
    """
    cards = list(hole_cards) + list(community_cards)
    if len(cards) < HAND_SIZE or len(cards) > 7:
        raise ValueError(f"Need 5-7 cards, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in hand")

    best, _ = best_subset(
        cards, HAND_SIZE, key=lambda combo: evaluate_five(combo).strength
    )
    return evaluate_five(best)


def evaluate_five(cards: Sequence[Card]) -> HandResult:
    """Classify exactly 5 cards."""
    if len(cards) != HAND_SIZE:
        raise ValueError(f"Need exactly 5 cards, got {len(cards)}")

    # Sort by rank descending
    sorted_cards = sorted(cards, key=lambda c: c.rank, reverse=True)
    ranks = [int(c.rank) for c in sorted_cards]

    is_flush = len({c.suit for c in sorted_cards}) == 1
    straight_high = _straight_high(ranks)

    rank_counts = Counter(ranks)
    counts = sorted(rank_counts.values(), reverse=True)

    if straight_high is not None and is_flush:
        if straight_high == Rank.ACE:
            return _result(HandRank.ROYAL_FLUSH, ranks, sorted_cards)
        return _result(HandRank.STRAIGHT_FLUSH, [straight_high],
                       _straight_order(sorted_cards, straight_high))

    if counts == [4, 1]:
        quad = _ranks_with_count(rank_counts, 4)
        kicker = _ranks_with_count(rank_counts, 1)
        return _result(HandRank.FOUR_OF_A_KIND, quad + kicker,
                       _sort_by_count(sorted_cards, rank_counts))

    if counts == [3, 2]:
        trips = _ranks_with_count(rank_counts, 3)
        pair = _ranks_with_count(rank_counts, 2)
        return _result(HandRank.FULL_HOUSE, trips + pair,
                       _sort_by_count(sorted_cards, rank_counts))

    if is_flush:
        return _result(HandRank.FLUSH, ranks, sorted_cards)

    if straight_high is not None:
        return _result(HandRank.STRAIGHT, [straight_high],
                       _straight_order(sorted_cards, straight_high))

    if counts == [3, 1, 1]:
        trips = _ranks_with_count(rank_counts, 3)
        kickers = _ranks_with_count(rank_counts, 1)
        return _result(HandRank.THREE_OF_A_KIND, trips + kickers,
                       _sort_by_count(sorted_cards, rank_counts))

    if counts == [2, 2, 1]:
        pairs = _ranks_with_count(rank_counts, 2)
        kicker = _ranks_with_count(rank_counts, 1)
        return _result(HandRank.TWO_PAIR, pairs + kicker,
                       _sort_by_count(sorted_cards, rank_counts))

    if counts == [2, 1, 1, 1]:
        pair = _ranks_with_count(rank_counts, 2)
        kickers = _ranks_with_count(rank_counts, 1)
        return _result(HandRank.ONE_PAIR, pair + kickers,
                       _sort_by_count(sorted_cards, rank_counts))

    return _result(HandRank.HIGH_CARD, ranks, sorted_cards)


def compare_hands(a: HandResult, b: HandResult) -> int:
    """
    Compare two evaluated hands.

    Returns:
        Positive if a wins, negative if b wins, 0 for an exact tie
    """
    if a.rank != b.rank:
        return int(a.rank) - int(b.rank)

    for x, y in zip(a.tie_break, b.tie_break):
        if x != y:
            return x - y

    return 0


def _result(hand_type: HandRank, tie_break: List[int], cards: List[Card]) -> HandResult:
    tie = tuple(int(r) for r in tie_break)
    return HandResult(hand_type, tie, tuple(cards), describe(hand_type, tie))


def _straight_high(ranks: List[int]) -> Optional[int]:
    """
    High card of a straight formed by 5 ranks sorted descending, or None.
    """
    if len(set(ranks)) != HAND_SIZE:
        return None

    if ranks[0] - ranks[4] == 4:
        return ranks[0]

    # Wheel (A-2-3-4-5)
    if ranks == [Rank.ACE, Rank.FIVE, Rank.FOUR, Rank.THREE, Rank.TWO]:
        return int(Rank.FIVE)

    return None


def _ranks_with_count(rank_counts: Counter, count: int) -> List[int]:
    """Ranks appearing exactly 'count' times, highest first."""
    return sorted((r for r, c in rank_counts.items() if c == count), reverse=True)


def _sort_by_count(cards: List[Card], rank_counts: Counter) -> List[Card]:
    """Sort cards by count (descending), then by rank (descending)."""
    return sorted(cards, key=lambda c: (rank_counts[c.rank], c.rank), reverse=True)


def _straight_order(cards: List[Card], high: int) -> List[Card]:
    """Put the Ace last in a wheel (5-4-3-2-A)."""
    if high != Rank.FIVE:
        return cards
    ace = [c for c in cards if c.rank == Rank.ACE]
    others = [c for c in cards if c.rank != Rank.ACE]
    return others + ace


def describe(hand_type: HandRank, tie_break: Sequence[int]) -> str:
    """Human-readable description of a category and its tie-break vector."""
    if hand_type == HandRank.ROYAL_FLUSH:
        return "Royal Flush"
    elif hand_type == HandRank.STRAIGHT_FLUSH:
        return f"Straight Flush, {_rank_name(tie_break[0])} high"
    elif hand_type == HandRank.FOUR_OF_A_KIND:
        return f"Four of a Kind, {_plural(tie_break[0])}"
    elif hand_type == HandRank.FULL_HOUSE:
        return f"Full House, {_plural(tie_break[0])} full of {_plural(tie_break[1])}"
    elif hand_type == HandRank.FLUSH:
        return f"Flush, {_rank_name(tie_break[0])} high"
    elif hand_type == HandRank.STRAIGHT:
        if tie_break[0] == Rank.FIVE:
            return "Straight, Five high (Wheel)"
        return f"Straight, {_rank_name(tie_break[0])} high"
    elif hand_type == HandRank.THREE_OF_A_KIND:
        return f"Three of a Kind, {_plural(tie_break[0])}"
    elif hand_type == HandRank.TWO_PAIR:
        return f"Two Pair, {_plural(tie_break[0])} and {_plural(tie_break[1])}"
    elif hand_type == HandRank.ONE_PAIR:
        return f"Pair of {_plural(tie_break[0])}"
    else:
        return f"High Card, {_rank_name(tie_break[0])}"


_RANK_NAMES = {
    Rank.TWO: "Two", Rank.THREE: "Three", Rank.FOUR: "Four",
    Rank.FIVE: "Five", Rank.SIX: "Six", Rank.SEVEN: "Seven",
    Rank.EIGHT: "Eight", Rank.NINE: "Nine", Rank.TEN: "Ten",
    Rank.JACK: "Jack", Rank.QUEEN: "Queen", Rank.KING: "King",
    Rank.ACE: "Ace",
}


def _rank_name(rank: int) -> str:
    return _RANK_NAMES[Rank(rank)]


def _plural(rank: int) -> str:
    name = _rank_name(rank)
    return name + ("es" if rank == Rank.SIX else "s")
