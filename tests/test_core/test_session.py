"""
Tests for the room registry and hand orchestration.
"""

import pytest
from pokerroom.core.errors import (
    AlreadySeatedError, HandInProgressError, HandNotInProgressError,
    InvalidAmountError, NotEnoughPlayersError, RoomFullError, RoomNotFoundError,
)
from pokerroom.core.rules import GamePhase


@pytest.fixture
def room(manager):
    """A room with three players seated, 1000 chips each."""
    room = manager.create_room("Table 1")
    for i in range(3):
        manager.join_room(room.room_id, f"p{i}", f"Player {i}", buy_in=1000)
    return room


def fold_around(manager, room):
    """Fold whoever is to act until one player is left."""
    update = None
    while update is None or not update.is_hand_over:
        current = room.engine.get_state().current_player
        update = manager.apply_action(room.room_id, current.player_id, "fold")
        assert update.success, update.error
    return update


class TestRooms:
    """Tests for creating and listing rooms."""

    def test_create_room_defaults(self, manager):
        room = manager.create_room("Table 1")
        assert room.small_blind == 10
        assert room.big_blind == 20
        assert room.max_players == 6
        assert room.players == []
        assert manager.get_room(room.room_id) is room

    def test_small_blind_defaults_to_half(self, manager):
        room = manager.create_room("Deep", big_blind=50)
        assert room.small_blind == 25

    @pytest.mark.parametrize("kwargs", [
        {"max_players": 1},
        {"max_players": 11},
        {"big_blind": 0},
        {"small_blind": 30, "big_blind": 20},
        {"small_blind": -1},
    ])
    def test_invalid_settings(self, manager, kwargs):
        with pytest.raises(ValueError):
            manager.create_room("Bad", **kwargs)

    def test_list_rooms(self, manager, room):
        infos = manager.list_rooms()
        assert len(infos) == 1
        info = infos[0]
        assert info.id == room.room_id
        assert info.name == "Table 1"
        assert info.player_count == 3
        assert not info.is_game_started

    def test_room_to_dict(self, room):
        data = room.to_dict()
        assert data["id"] == room.room_id
        assert [p["id"] for p in data["players"]] == ["p0", "p1", "p2"]
        assert all(p["cards"] == [] for p in data["players"])


class TestJoinLeave:
    """Tests for seating players."""

    def test_lowest_free_seat(self, manager, room):
        assert [p.position for p in room.players] == [0, 1, 2]
        manager.leave_room("p1")
        manager.join_room(room.room_id, "p3", "Player 3", buy_in=500)
        assert room.get_player("p3").position == 1

    def test_room_not_found(self, manager):
        with pytest.raises(RoomNotFoundError):
            manager.join_room("missing", "p0", "Player 0", buy_in=1000)

    def test_already_seated(self, manager, room):
        other = manager.create_room("Table 2")
        with pytest.raises(AlreadySeatedError):
            manager.join_room(other.room_id, "p0", "Player 0", buy_in=1000)

    def test_room_full(self, manager):
        room = manager.create_room("Small", max_players=2)
        manager.join_room(room.room_id, "a", "A", buy_in=100)
        manager.join_room(room.room_id, "b", "B", buy_in=100)
        with pytest.raises(RoomFullError):
            manager.join_room(room.room_id, "c", "C", buy_in=100)

    def test_cannot_join_during_hand(self, manager, room):
        manager.start_hand(room.room_id)
        with pytest.raises(HandInProgressError):
            manager.join_room(room.room_id, "p9", "Late", buy_in=1000)

    @pytest.mark.parametrize("buy_in", [0, -10, True, "100"])
    def test_invalid_buy_in(self, manager, room, buy_in):
        with pytest.raises(InvalidAmountError):
            manager.join_room(room.room_id, "p9", "Player 9", buy_in=buy_in)

    def test_get_room_by_player(self, manager, room):
        assert manager.get_room_by_player("p2") is room
        assert manager.get_room_by_player("nobody") is None

    def test_leave_unknown_player(self, manager):
        assert manager.leave_room("nobody") is None

    def test_last_player_out_deletes_room(self, manager, room):
        for pid in ["p0", "p1", "p2"]:
            manager.leave_room(pid)
        assert manager.get_room(room.room_id) is None
        assert manager.list_rooms() == []

    def test_leave_mid_hand_forfeits(self, manager):
        room = manager.create_room("Heads up")
        manager.join_room(room.room_id, "a", "A", buy_in=1000)
        manager.join_room(room.room_id, "b", "B", buy_in=1000)
        manager.start_hand(room.room_id)

        manager.leave_room("a")

        assert room.is_settled
        assert room.winners[0].player_id == "b"
        assert room.get_player("a") is None
        # b wins a's blind
        assert room.get_player("b").chips in (1010, 1020)

    def test_set_connected(self, manager, room):
        manager.set_connected("p1", False)
        assert not room.get_player("p1").is_connected


class TestStartHand:
    """Tests for dealing hands in a room."""

    def test_needs_two_players(self, manager):
        room = manager.create_room("Lonely")
        manager.join_room(room.room_id, "a", "A", buy_in=1000)
        with pytest.raises(NotEnoughPlayersError):
            manager.start_hand(room.room_id)

    def test_broke_players_do_not_count(self, manager, room):
        room.get_player("p0").chips = 0
        room.get_player("p1").chips = 0
        with pytest.raises(NotEnoughPlayersError):
            manager.start_hand(room.room_id)

    def test_start_hand(self, manager, room):
        update = manager.start_hand(room.room_id)
        assert update.success
        assert not update.is_hand_over
        assert update.state.phase == GamePhase.PREFLOP
        assert update.state.pot == 30
        assert update.state.hand_number == 1
        assert room.is_hand_in_progress
        assert room.engine is not None
        assert room.info().is_game_started

    def test_cannot_start_twice(self, manager, room):
        manager.start_hand(room.room_id)
        with pytest.raises(HandInProgressError):
            manager.start_hand(room.room_id)

    def test_unknown_room(self, manager):
        with pytest.raises(RoomNotFoundError):
            manager.start_hand("missing")

    def test_dealer_is_random(self, manager, room):
        dealers = set()
        for _ in range(30):
            update = manager.start_hand(room.room_id)
            dealers.add(update.state.dealer_index)
            manager.end_hand(room.room_id)
        assert dealers == {0, 1, 2}

    def test_all_in_blinds_settle_immediately(self, manager):
        room = manager.create_room("Tiny")
        manager.join_room(room.room_id, "a", "A", buy_in=10)
        manager.join_room(room.room_id, "b", "B", buy_in=10)

        update = manager.start_hand(room.room_id)
        assert update.is_hand_over
        assert room.is_settled
        assert sum(p.chips for p in room.players) == 20


class TestApplyAction:
    """Tests for relaying actions to the engine."""

    def test_no_hand(self, manager, room):
        with pytest.raises(HandNotInProgressError):
            manager.apply_action(room.room_id, "p0", "fold")

    def test_rejection_is_reported(self, manager, room):
        update = manager.start_hand(room.room_id)
        current = update.state.current_player
        others = [p for p in update.state.players if p is not current]

        rejected = manager.apply_action(room.room_id, others[0].player_id, "call")
        assert not rejected.success
        assert rejected.error == "Not your turn"
        assert not rejected.is_hand_over

    def test_settles_once_at_showdown(self, manager, room):
        manager.start_hand(room.room_id)
        update = fold_around(manager, room)

        assert len(update.winners) == 1
        winner = room.get_player(update.winners[0].player_id)
        assert update.winners[0].win_amount == 30
        assert room.is_settled
        assert sum(p.chips for p in room.players) == 3000
        assert winner.chips > 1000

        # The settled hand takes no more actions
        with pytest.raises(HandNotInProgressError):
            manager.apply_action(room.room_id, winner.player_id, "check")

    def test_views(self, manager, room):
        manager.start_hand(room.room_id)
        state = manager.get_state_for_player(room.room_id, "p0")
        assert len(state.players[0].cards) == 2
        assert state.players[1].cards == []

        current = state.current_player.player_id
        assert manager.legal_actions(room.room_id, current)
        assert manager.reveal_hands(room.room_id) == []

    def test_views_without_hand(self, manager, room):
        assert manager.get_state_for_player(room.room_id, "p0") is None
        assert manager.legal_actions(room.room_id, "p0") == []
        assert manager.reveal_hands(room.room_id) == []


class TestEndHand:
    """Tests for resetting a room between hands."""

    def test_chips_carry_over(self, manager, room):
        for hand in range(1, 6):
            update = manager.start_hand(room.room_id)
            assert update.state.hand_number == hand
            fold_around(manager, room)
            manager.end_hand(room.room_id)

            assert not room.is_hand_in_progress
            assert not room.is_settled
            assert room.engine is None
            assert room.winners is None
            assert sum(p.chips for p in room.players) == 3000
            assert all(p.cards == [] and p.current_bet == 0 for p in room.players)

        assert room.hands_played == 5

    def test_abandoned_hand_is_refunded(self, manager, room):
        manager.start_hand(room.room_id)
        manager.end_hand(room.room_id)
        assert [p.chips for p in room.players] == [1000, 1000, 1000]

    def test_end_hand_for_missing_room(self, manager):
        manager.end_hand("missing")
