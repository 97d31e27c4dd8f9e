"""
Pytest configuration and shared fixtures for PokerRoom tests.
"""

import random

import pytest
from pokerroom.core.card import Card, Rank, Suit, parse_cards
from pokerroom.core.player import Player
from pokerroom.core.engine import PokerEngine
from pokerroom.core.rules import GamePhase
from pokerroom.core.session import SessionManager


@pytest.fixture
def rng():
    """Seeded random source so deals are reproducible."""
    return random.Random(42)


@pytest.fixture
def make_players():
    """Factory: make_players(100, 200) -> players p0, p1 at seats 0, 1."""
    def _make(*stacks):
        return [
            Player(player_id=f"p{i}", name=f"Player {i}", chips=chips, position=i)
            for i, chips in enumerate(stacks)
        ]
    return _make


@pytest.fixture
def make_engine(make_players, rng):
    """Factory for an engine over the given stacks, blinds 10/20."""
    def _make(*stacks, dealer_index=0, small_blind=10, big_blind=20, start=True):
        engine = PokerEngine(
            make_players(*stacks),
            dealer_index=dealer_index,
            small_blind=small_blind,
            big_blind=big_blind,
            rng=rng,
            hand_number=1,
        )
        if start:
            engine.start_hand()
        return engine
    return _make


@pytest.fixture
def three_player_engine(make_engine):
    """3 players with 100 chips each, dealer at seat 0 (SB seat 1, BB seat 2)."""
    return make_engine(100, 100, 100)


@pytest.fixture
def heads_up_engine(make_engine):
    """2 players with 1000 chips each, dealer at seat 0 (posts the SB)."""
    return make_engine(1000, 1000)


@pytest.fixture
def act():
    """act(engine, action, amount=None): act for whoever's turn it is."""
    def _act(engine, action, amount=None):
        current = engine.get_state().current_player
        assert current is not None, "nobody to act"
        result = engine.apply_action(current.player_id, action, amount)
        assert result.success, result.error
        return result
    return _act


@pytest.fixture
def check_down(act):
    """Call/check every street until the river is open (or the hand ends)."""
    def _check_down(engine, until=GamePhase.RIVER):
        while engine.phase is not until and not engine.is_hand_over():
            state = engine.get_state()
            player = state.current_player
            to_call = state.current_bet - player.current_bet
            act(engine, "call" if to_call > 0 else "check")
    return _check_down


@pytest.fixture
def rig():
    """
    rig(engine, {"p0": "As Ah", ...}, "2d 3c 4d 5c 7h"): replace hole cards
    and board so a showdown has a known outcome.
    """
    def _rig(engine, hands, board=None):
        state = engine._state
        for player in state.players:
            if player.player_id in hands:
                player.cards = parse_cards(hands[player.player_id])
        if board is not None:
            state.community_cards = parse_cards(board)
    return _rig


@pytest.fixture
def manager():
    """Session manager with a seeded random source."""
    return SessionManager(rng=random.Random(7))


@pytest.fixture
def sample_hand():
    """Create a sample 5-card hand (pair of aces)."""
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.ACE, Suit.HEARTS),
        Card(Rank.KING, Suit.DIAMONDS),
        Card(Rank.QUEEN, Suit.CLUBS),
        Card(Rank.JACK, Suit.SPADES),
    ]


@pytest.fixture
def royal_flush():
    """Create a royal flush hand."""
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.KING, Suit.SPADES),
        Card(Rank.QUEEN, Suit.SPADES),
        Card(Rank.JACK, Suit.SPADES),
        Card(Rank.TEN, Suit.SPADES),
    ]


@pytest.fixture
def straight_flush():
    """Create a straight flush (9-high)."""
    return [
        Card(Rank.NINE, Suit.HEARTS),
        Card(Rank.EIGHT, Suit.HEARTS),
        Card(Rank.SEVEN, Suit.HEARTS),
        Card(Rank.SIX, Suit.HEARTS),
        Card(Rank.FIVE, Suit.HEARTS),
    ]


@pytest.fixture
def wheel_straight():
    """Create a wheel straight (A-2-3-4-5)."""
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.TWO, Suit.HEARTS),
        Card(Rank.THREE, Suit.DIAMONDS),
        Card(Rank.FOUR, Suit.CLUBS),
        Card(Rank.FIVE, Suit.SPADES),
    ]
