"""
Room registry and hand orchestration.

A SessionManager owns every Room; a Room owns its seated players and, while
a hand is running, the PokerEngine for it. Chip balances live on the room's
players and are written back from the engine when a hand settles.

Lobby and start-hand failures raise PokerError subclasses. Engine
rejections of an action come back as an unsuccessful HandUpdate.
"""

from __future__ import annotations
import logging
import random
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pokerroom.core.engine import PokerEngine, GameState, WinnerResult
from pokerroom.core.errors import (
    AlreadySeatedError, HandInProgressError, HandNotInProgressError,
    InvalidAmountError, NotEnoughPlayersError, RoomFullError, RoomNotFoundError,
)
from pokerroom.core.player import Player
from pokerroom.core.rules import (
    DEFAULT_BIG_BLIND, DEFAULT_MAX_PLAYERS, MAX_PLAYERS, MIN_PLAYERS,
    small_blind_for,
)


logger = logging.getLogger(__name__)


@dataclass
class RoomInfo:
    """Lobby listing entry."""
    id: str
    name: str
    player_count: int
    max_players: int
    is_game_started: bool
    small_blind: int
    big_blind: int


@dataclass
class Room:
    """A table: seated players plus the engine of the hand in progress."""
    room_id: str
    name: str
    small_blind: int
    big_blind: int
    max_players: int = DEFAULT_MAX_PLAYERS
    players: List[Player] = field(default_factory=list)
    engine: Optional[PokerEngine] = None
    is_hand_in_progress: bool = False
    is_settled: bool = False
    hands_played: int = 0
    winners: Optional[List[WinnerResult]] = None

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def info(self) -> RoomInfo:
        return RoomInfo(
            id=self.room_id,
            name=self.name,
            player_count=len(self.players),
            max_players=self.max_players,
            is_game_started=self.is_hand_in_progress,
            small_blind=self.small_blind,
            big_blind=self.big_blind,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.room_id,
            "name": self.name,
            "players": [p.to_dict() for p in self.players],
            "max_players": self.max_players,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "is_game_started": self.is_hand_in_progress,
        }


@dataclass
class HandUpdate:
    """Outcome of starting a hand or applying an action in a room."""
    success: bool
    error: Optional[str] = None
    state: Optional[GameState] = None
    winners: Optional[List[WinnerResult]] = None

    @property
    def is_hand_over(self) -> bool:
        return self.winners is not None


class SessionManager:
    """
    Registry of rooms and the hands running in them.

    Usage:
        manager = SessionManager()
        room = manager.create_room("Table 1")
        manager.join_room(room.room_id, "p1", "Alice", buy_in=1000)
        manager.join_room(room.room_id, "p2", "Bob", buy_in=1000)
        manager.start_hand(room.room_id)
        update = manager.apply_action(room.room_id, "p1", "call")
        if update.is_hand_over:
            manager.end_hand(room.room_id)
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source for dealer selection and shuffling.
                Defaults to random.SystemRandom().
        """
        self._rng = rng if rng is not None else random.SystemRandom()
        self.rooms: Dict[str, Room] = {}
        self._player_rooms: Dict[str, str] = {}  # player_id -> room_id

    # ------------------------------------------------------------------
    # Lobby

    def create_room(
        self,
        name: str,
        max_players: int = DEFAULT_MAX_PLAYERS,
        small_blind: Optional[int] = None,
        big_blind: int = DEFAULT_BIG_BLIND,
    ) -> Room:
        """Create an empty room."""
        if not MIN_PLAYERS <= max_players <= MAX_PLAYERS:
            raise ValueError(f"max_players must be {MIN_PLAYERS}-{MAX_PLAYERS}")
        if big_blind <= 0:
            raise ValueError("Big blind must be positive")
        if small_blind is None:
            small_blind = small_blind_for(big_blind)
        if not 0 <= small_blind <= big_blind:
            raise ValueError("Small blind must be between 0 and the big blind")

        room = Room(
            room_id=str(uuid.uuid4()),
            name=name,
            small_blind=small_blind,
            big_blind=big_blind,
            max_players=max_players,
        )
        self.rooms[room.room_id] = room
        logger.info(f"Created room {room.room_id} ({name!r}, blinds {small_blind}/{big_blind})")
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def get_room_by_player(self, player_id: str) -> Optional[Room]:
        room_id = self._player_rooms.get(player_id)
        return self.rooms.get(room_id) if room_id else None

    def list_rooms(self) -> List[RoomInfo]:
        return [room.info() for room in self.rooms.values()]

    def join_room(self, room_id: str, player_id: str, player_name: str, buy_in: int) -> Room:
        """
        Seat a player at the lowest free position.

        Raises:
            RoomNotFoundError, AlreadySeatedError, RoomFullError,
            HandInProgressError, InvalidAmountError
        """
        room = self._require_room(room_id)

        if player_id in self._player_rooms:
            raise AlreadySeatedError()
        if len(room.players) >= room.max_players:
            raise RoomFullError()
        if room.is_hand_in_progress:
            raise HandInProgressError()
        if isinstance(buy_in, bool) or not isinstance(buy_in, int) or buy_in <= 0:
            raise InvalidAmountError(buy_in)

        used = {p.position for p in room.players}
        position = 0
        while position in used:
            position += 1

        room.players.append(Player(
            player_id=player_id,
            name=player_name,
            chips=buy_in,
            position=position,
        ))
        self._player_rooms[player_id] = room_id
        logger.info(f"{player_id} ({player_name!r}) joined room {room_id} at seat {position}")
        return room

    def leave_room(self, player_id: str) -> Optional[Room]:
        """
        Remove a player from their room, folding them out of a live hand.

        An emptied room is deleted together with its engine.

        Returns:
            The room left (with no players if it was deleted), or None if the
            player was not seated anywhere
        """
        room_id = self._player_rooms.pop(player_id, None)
        if room_id is None:
            return None
        room = self.rooms.get(room_id)
        if room is None:
            return None

        if room.engine is not None and not room.is_settled:
            room.engine.forfeit(player_id)
            if room.engine.is_hand_over():
                self._settle(room)

        room.players = [p for p in room.players if p.player_id != player_id]
        logger.info(f"{player_id} left room {room_id}")

        if not room.players:
            room.engine = None
            room.is_hand_in_progress = False
            del self.rooms[room_id]
            logger.info(f"Deleted empty room {room_id}")

        return room

    def set_connected(self, player_id: str, is_connected: bool) -> None:
        room = self.get_room_by_player(player_id)
        if room is None:
            return
        player = room.get_player(player_id)
        if player is not None:
            player.is_connected = is_connected

    # ------------------------------------------------------------------
    # Hands

    def start_hand(self, room_id: str) -> HandUpdate:
        """
        Pick a random dealer and deal a new hand.

        Raises:
            RoomNotFoundError, HandInProgressError, NotEnoughPlayersError
        """
        room = self._require_room(room_id)
        if room.is_hand_in_progress:
            raise HandInProgressError()

        eligible = [p for p in room.players if p.chips > 0]
        if len(eligible) < MIN_PLAYERS:
            raise NotEnoughPlayersError(MIN_PLAYERS)

        for player in room.players:
            player.reset_for_new_hand()

        dealer_index = self._rng.randrange(len(eligible))
        engine = PokerEngine(
            eligible,
            dealer_index=dealer_index,
            small_blind=room.small_blind,
            big_blind=room.big_blind,
            rng=self._rng,
            hand_number=room.hands_played + 1,
        )
        state = engine.start_hand()

        room.hands_played += 1
        room.engine = engine
        room.is_hand_in_progress = True
        room.is_settled = False

        if engine.is_hand_over():
            return self._settle(room)
        return HandUpdate(True, state=state)

    def apply_action(
        self,
        room_id: str,
        player_id: str,
        action: Any,
        amount: Optional[int] = None,
    ) -> HandUpdate:
        """
        Forward an action to the room's engine, settling the pot at showdown.

        Raises:
            RoomNotFoundError, HandNotInProgressError
        """
        room = self._require_room(room_id)
        engine = room.engine
        if engine is None or room.is_settled:
            raise HandNotInProgressError()

        result = engine.apply_action(player_id, action, amount)
        if not result.success:
            return HandUpdate(False, error=result.error, state=result.state)

        if engine.is_hand_over():
            return self._settle(room)
        return HandUpdate(True, state=result.state)

    def _settle(self, room: Room) -> HandUpdate:
        """Pay the pot once and copy chip counts back onto the room."""
        engine = room.engine
        winners = engine.determine_winners()
        engine.distribute_winnings(winners)
        room.is_settled = True
        room.winners = winners

        final = engine.get_state()
        self._sync_chips(room, {p.player_id: p.chips for p in final.players})
        return HandUpdate(True, state=final, winners=winners)

    def end_hand(self, room_id: str) -> None:
        """
        Discard the hand and ready the room for the next one.

        Chips are kept. A hand abandoned before showdown refunds what each
        player put in.
        """
        room = self.rooms.get(room_id)
        if room is None:
            return

        if room.engine is not None and not room.is_settled:
            state = room.engine.get_state()
            logger.warning(f"Hand #{state.hand_number} in room {room_id} abandoned, refunding bets")
            self._sync_chips(
                room,
                {p.player_id: p.chips + p.total_bet_in_round for p in state.players},
            )

        room.engine = None
        room.is_hand_in_progress = False
        room.is_settled = False
        room.winners = None
        for player in room.players:
            player.reset_for_new_hand()

    def _sync_chips(self, room: Room, chips: Dict[str, int]) -> None:
        for player in room.players:
            if player.player_id in chips:
                player.chips = chips[player.player_id]

    # ------------------------------------------------------------------
    # Views

    def get_state_for_player(self, room_id: str, player_id: str) -> Optional[GameState]:
        room = self._require_room(room_id)
        if room.engine is None:
            return None
        return room.engine.get_state_for_player(player_id)

    def legal_actions(self, room_id: str, player_id: str) -> List[Dict[str, Any]]:
        room = self._require_room(room_id)
        if room.engine is None or room.is_settled:
            return []
        return room.engine.legal_actions(player_id)

    def reveal_hands(self, room_id: str) -> List[Dict[str, Any]]:
        room = self._require_room(room_id)
        if room.engine is None:
            return []
        return room.engine.reveal_hands()

    def _require_room(self, room_id: str) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room
