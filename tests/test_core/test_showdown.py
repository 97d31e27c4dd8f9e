"""
Tests for showdown winner determination and pot distribution.

These tests verify:
- Correct hand ranking at showdown
- Tie handling and pot splitting, including the odd chip
- Settlement happening exactly once
"""

import pytest
from pokerroom.core.engine import WinnerResult
from pokerroom.core.errors import PlayerNotFoundError, StateError
from pokerroom.core.hand import HandRank, HandResult
from pokerroom.core.rules import GamePhase


@pytest.fixture
def play_to_showdown(check_down, act, rig):
    """Check the hand down to the river, rig the cards, then check it out."""
    def _play(engine, hands, board):
        check_down(engine, until=GamePhase.RIVER)
        rig(engine, hands, board)
        while not engine.is_hand_over():
            act(engine, "check")
        return engine.determine_winners()
    return _play


class TestShowdownBasics:
    """Basic showdown tests."""

    def test_best_hand_wins_pot(self, three_player_engine, play_to_showdown):
        winners = play_to_showdown(
            three_player_engine,
            {"p0": "As Ah", "p1": "Ks Kh", "p2": "7c 8d"},
            "2h 5c 9d Jc 3s",
        )
        assert len(winners) == 1
        assert winners[0].player_id == "p0"
        assert winners[0].player_name == "Player 0"
        assert winners[0].win_amount == 60
        assert winners[0].hand_result.rank == HandRank.ONE_PAIR
        assert winners[0].hand_result.description == "Pair of Aces"

    def test_kicker_decides(self, heads_up_engine, play_to_showdown):
        winners = play_to_showdown(
            heads_up_engine,
            {"p0": "Ac Qd", "p1": "Ad Jc"},
            "As 8h 6d 4c 2s",
        )
        assert winners[0].player_id == "p0"
        assert winners[0].win_amount == 40

    def test_best_five_of_seven(self, three_player_engine, play_to_showdown):
        """A flush made with the board beats a higher pair."""
        winners = play_to_showdown(
            three_player_engine,
            {"p0": "Ac Ad", "p1": "2h 3c", "p2": "Kc Qd"},
            "9h 7h 5h Jh 4s",
        )
        assert winners[0].player_id == "p1"
        assert winners[0].hand_result.rank == HandRank.FLUSH

    def test_distribute_credits_winner(self, three_player_engine, play_to_showdown):
        winners = play_to_showdown(
            three_player_engine,
            {"p0": "As Ah", "p1": "Ks Kh", "p2": "7c 8d"},
            "2h 5c 9d Jc 3s",
        )
        three_player_engine.distribute_winnings(winners)
        state = three_player_engine.get_state()
        assert [p.chips for p in state.players] == [140, 80, 80]
        assert state.pot == 0


class TestSplitPots:
    """Tied hands share the pot."""

    def test_board_plays(self, heads_up_engine, play_to_showdown):
        winners = play_to_showdown(
            heads_up_engine,
            {"p0": "2c 3d", "p1": "4c 5d"},
            "Ts Js Qs Ks As",
        )
        assert len(winners) == 2
        assert all(w.hand_result.rank == HandRank.ROYAL_FLUSH for w in winners)
        assert sorted(w.win_amount for w in winners) == [20, 20]

    def test_odd_chip_goes_left_of_dealer(self, make_engine, act, play_to_showdown):
        """Pot 25 split two ways: the tied winner nearest the dealer's left gets 13."""
        engine = make_engine(100, 100, 100, small_blind=5, big_blind=10)
        act(engine, "call")   # p0
        act(engine, "fold")   # p1 leaves 5 in the pot
        act(engine, "check")  # p2
        assert engine.pot == 25

        winners = play_to_showdown(
            engine,
            {"p0": "Ac Kd", "p2": "Ad Kc"},
            "2h 5s 9d Jc 3s",
        )
        assert [(w.player_id, w.win_amount) for w in winners] == [("p2", 13), ("p0", 12)]

        engine.distribute_winnings(winners)
        state = engine.get_state()
        assert sum(p.chips for p in state.players) == 300

    def test_three_way_tie(self, three_player_engine, play_to_showdown):
        winners = play_to_showdown(
            three_player_engine,
            {"p0": "2c 3d", "p1": "2d 3c", "p2": "2s 3h"},
            "Ts Js Qs Ks As",
        )
        # Dealer is seat 0, so seats 1, 2, 0 in that order
        assert [w.player_id for w in winners] == ["p1", "p2", "p0"]
        assert [w.win_amount for w in winners] == [20, 20, 20]


class TestUndividedPot:
    """Unequal all-ins still play for one pot."""

    def test_short_stack_wins_whole_pot(self, make_engine, rig):
        engine = make_engine(500, 200)
        engine.apply_action("p0", "all-in")
        engine.apply_action("p1", "all-in")
        assert engine.is_hand_over()

        rig(engine, {"p0": "7c 2d", "p1": "As Ah"}, "Ks 9h 8d 4c Jh")
        winners = engine.determine_winners()
        assert winners[0].player_id == "p1"
        assert winners[0].win_amount == 700


class TestSettlement:
    """determine_winners / distribute_winnings contracts."""

    def test_winners_only_at_showdown(self, three_player_engine):
        with pytest.raises(StateError):
            three_player_engine.determine_winners()

    def test_distribute_only_at_showdown(self, three_player_engine):
        with pytest.raises(StateError):
            three_player_engine.distribute_winnings([])

    def test_distribute_exactly_once(self, three_player_engine):
        three_player_engine.apply_action("p0", "fold")
        three_player_engine.apply_action("p1", "fold")
        winners = three_player_engine.determine_winners()
        three_player_engine.distribute_winnings(winners)

        with pytest.raises(StateError):
            three_player_engine.distribute_winnings(winners)
        assert three_player_engine.get_state().players[2].chips == 110

    def test_unknown_winner_rejected(self, heads_up_engine):
        heads_up_engine.apply_action("p0", "fold")
        bogus = WinnerResult("ghost", "Ghost", HandResult.winner_by_fold(), 30)
        with pytest.raises(PlayerNotFoundError):
            heads_up_engine.distribute_winnings([bogus])

    def test_winnings_cannot_exceed_pot(self, heads_up_engine):
        heads_up_engine.apply_action("p0", "fold")
        greedy = WinnerResult("p1", "Player 1", HandResult.winner_by_fold(), 1000)
        with pytest.raises(ValueError):
            heads_up_engine.distribute_winnings([greedy])
        assert heads_up_engine.pot == 30


class TestRevealHands:

    def test_reveal_at_showdown(self, three_player_engine, play_to_showdown):
        play_to_showdown(
            three_player_engine,
            {"p0": "As Ah", "p1": "Ks Kh", "p2": "7c 8d"},
            "2h 5c 9d Jc 3s",
        )
        revealed = three_player_engine.reveal_hands()
        assert [r["player_id"] for r in revealed] == ["p0", "p1", "p2"]
        assert revealed[0]["hand"]["rank_name"] == "One Pair"
        assert len(revealed[1]["cards"]) == 2

    def test_nothing_revealed_before_showdown(self, three_player_engine):
        assert three_player_engine.reveal_hands() == []

    def test_nothing_revealed_after_folds(self, three_player_engine):
        three_player_engine.apply_action("p0", "fold")
        three_player_engine.apply_action("p1", "fold")
        assert three_player_engine.reveal_hands() == []
