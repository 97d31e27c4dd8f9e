"""
WebSocket handling for real-time play.

This module provides:
- ConnectionManager: maps connections to player ids, serialises actions per
  room, and pushes personalised state to every seated player
- websocket_endpoint: the /ws message loop

Protocol (JSON, both directions): {"type": "<event>", "data": {...}}

Client -> server: get-rooms, create-room, join-room, leave-room,
start-game, new-hand, player-action.

Server -> client: connected, room-list, room-joined, player-joined,
player-left, room-left, game-started, player-acted, game-state-updated,
game-ended, error.
"""

from __future__ import annotations
from typing import Dict, Optional, Any, Set
import asyncio
import logging
import uuid

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError as SchemaError

from pokerroom.core.errors import PokerError
from pokerroom.core.session import HandUpdate, Room, SessionManager
from pokerroom.server.config import ServerConfig
from pokerroom.server.schemas import (
    ActionRequest, CreateAndJoinRequest, JoinRoomRequest, WSMessage,
)


logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Connection bookkeeping on top of a SessionManager.

    Usage:
        hub = ConnectionManager(SessionManager(), ServerConfig())
        player_id = await hub.connect(websocket)
        await hub.handle_message(player_id, {"type": "get-rooms"})
        await hub.disconnect(player_id)
    """

    def __init__(self, manager: SessionManager, config: ServerConfig):
        self.manager = manager
        self.config = config
        self.connections: Dict[str, WebSocket] = {}
        self._room_locks: Dict[str, asyncio.Lock] = {}
        self._pending: Set[asyncio.Task] = set()

    def room_lock(self, room_id: str) -> asyncio.Lock:
        """The lock serialising every hand operation in one room."""
        lock = self._room_locks.get(room_id)
        if lock is None:
            lock = self._room_locks[room_id] = asyncio.Lock()
        return lock

    # ------------------------------------------------------------------
    # Sending

    async def send(self, player_id: str, event: str, data: Optional[Dict[str, Any]] = None):
        ws = self.connections.get(player_id)
        if ws is None:
            return
        try:
            await ws.send_json({"type": event, "data": data or {}})
        except Exception as e:
            logger.error(f"Error sending {event} to {player_id}: {e}")

    async def send_error(self, player_id: str, message: str):
        await self.send(player_id, "error", {"message": message})

    async def broadcast_room(
        self,
        room: Room,
        event: str,
        data: Dict[str, Any],
        exclude: Optional[str] = None,
    ):
        for player in list(room.players):
            if player.player_id != exclude:
                await self.send(player.player_id, event, data)

    async def broadcast_room_list(self):
        rooms = [vars(info) for info in self.manager.list_rooms()]
        for player_id in list(self.connections):
            await self.send(player_id, "room-list", {"rooms": rooms})

    async def send_states(self, room: Room, event: str):
        """Send each seated player their own redacted view of the hand."""
        for player in list(room.players):
            state = self.manager.get_state_for_player(room.room_id, player.player_id)
            if state is None:
                continue
            await self.send(player.player_id, event, {
                "game_state": state.to_dict(),
                "legal_actions": self.manager.legal_actions(room.room_id, player.player_id),
            })

    # ------------------------------------------------------------------
    # Connection lifecycle

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        player_id = uuid.uuid4().hex
        self.connections[player_id] = websocket
        logger.info(f"Client connected: {player_id}")
        await self.send(player_id, "connected", {"player_id": player_id})
        return player_id

    async def disconnect(self, player_id: str):
        self.connections.pop(player_id, None)
        logger.info(f"Client disconnected: {player_id}")
        room = self.manager.get_room_by_player(player_id)
        if room is not None:
            self.manager.set_connected(player_id, False)
            await self._leave(player_id)

    # ------------------------------------------------------------------
    # Dispatch

    async def handle_message(self, player_id: str, message: Dict[str, Any]):
        """Route one inbound message; failures are reported to the sender."""
        try:
            envelope = WSMessage.model_validate(message)
            handler = self._handlers().get(envelope.type)
            if handler is None:
                await self.send_error(player_id, f"Unknown message type: {envelope.type}")
                return
            await handler(player_id, envelope.data)
        except SchemaError as e:
            await self.send_error(player_id, _schema_message(e))
        except (PokerError, ValueError) as e:
            logger.warning(f"Rejected message from {player_id}: {e}")
            await self.send_error(player_id, str(e))

    def _handlers(self):
        return {
            "get-rooms": self._handle_get_rooms,
            "create-room": self._handle_create_room,
            "join-room": self._handle_join_room,
            "leave-room": self._handle_leave_room,
            "start-game": self._handle_start_game,
            "new-hand": self._handle_new_hand,
            "player-action": self._handle_player_action,
        }

    async def _handle_get_rooms(self, player_id: str, data: Dict[str, Any]):
        rooms = [vars(info) for info in self.manager.list_rooms()]
        await self.send(player_id, "room-list", {"rooms": rooms})

    async def _handle_create_room(self, player_id: str, data: Dict[str, Any]):
        req = CreateAndJoinRequest.model_validate(data)
        room = self.manager.create_room(
            req.name,
            max_players=req.max_players,
            small_blind=req.small_blind,
            big_blind=req.big_blind,
        )
        try:
            self.manager.join_room(room.room_id, player_id, req.player_name, req.buy_in)
        except PokerError:
            # Creator could not sit down (e.g. already seated elsewhere)
            self.manager.rooms.pop(room.room_id, None)
            raise

        await self.send(player_id, "room-joined", {
            "room_id": room.room_id,
            "player_id": player_id,
            "room": room.to_dict(),
        })
        await self.broadcast_room_list()

    async def _handle_join_room(self, player_id: str, data: Dict[str, Any]):
        req = JoinRoomRequest.model_validate(data)
        room = self.manager.join_room(req.room_id, player_id, req.player_name, req.buy_in)

        await self.send(player_id, "room-joined", {
            "room_id": room.room_id,
            "player_id": player_id,
            "room": room.to_dict(),
        })
        await self.broadcast_room(room, "player-joined", {
            "player": room.get_player(player_id).to_dict(),
            "room": room.to_dict(),
        }, exclude=player_id)
        await self.broadcast_room_list()

    async def _handle_leave_room(self, player_id: str, data: Dict[str, Any]):
        if self.manager.get_room_by_player(player_id) is None:
            raise PokerError("Not in a room")
        await self._leave(player_id)
        await self.send(player_id, "room-left")

    async def _leave(self, player_id: str):
        room = self.manager.get_room_by_player(player_id)
        if room is None:
            return

        async with self.room_lock(room.room_id):
            was_settled = room.is_settled
            self.manager.leave_room(player_id)

        if room.players:
            await self.broadcast_room(room, "player-left", {
                "player_id": player_id,
                "room": room.to_dict(),
            })
            if room.is_settled and not was_settled:
                # The departure ended the hand
                await self._announce_hand_end(room, HandUpdate(True, winners=room.winners))
            elif room.engine is not None and not room.is_settled:
                await self.send_states(room, "game-state-updated")
        else:
            self._room_locks.pop(room.room_id, None)
        await self.broadcast_room_list()

    async def _handle_start_game(self, player_id: str, data: Dict[str, Any]):
        room = self._require_seat(player_id)
        async with self.room_lock(room.room_id):
            update = self.manager.start_hand(room.room_id)

        logger.info(f"Hand #{room.hands_played} started in room {room.room_id}")
        await self.send_states(room, "game-started")
        if update.is_hand_over:
            await self._announce_hand_end(room, update)
        await self.broadcast_room_list()

    async def _handle_new_hand(self, player_id: str, data: Dict[str, Any]):
        """Skip the post-showdown pause and deal the next hand."""
        room = self._require_seat(player_id)
        async with self.room_lock(room.room_id):
            if room.is_settled:
                self.manager.end_hand(room.room_id)
        await self._handle_start_game(player_id, data)

    async def _handle_player_action(self, player_id: str, data: Dict[str, Any]):
        req = ActionRequest.model_validate(data)
        room = self._require_seat(player_id)

        async with self.room_lock(room.room_id):
            update = self.manager.apply_action(room.room_id, player_id, req.action, req.amount)

        if not update.success:
            await self.send_error(player_id, update.error)
            return

        await self.broadcast_room(room, "player-acted", {
            "player_id": player_id,
            "action": req.action,
            "amount": req.amount,
        })
        await self.send_states(room, "game-state-updated")
        if update.is_hand_over:
            await self._announce_hand_end(room, update)

    # ------------------------------------------------------------------
    # Hand end

    async def _announce_hand_end(self, room: Room, update: HandUpdate):
        """Broadcast the result and reset the room after the configured pause."""
        showdown = self.manager.reveal_hands(room.room_id)
        for player in list(room.players):
            state = self.manager.get_state_for_player(room.room_id, player.player_id)
            await self.send(player.player_id, "game-ended", {
                "winners": [w.to_dict() for w in update.winners],
                "showdown": showdown,
                "game_state": state.to_dict() if state else None,
            })

        task = asyncio.create_task(self._end_hand_later(room.room_id, room.hands_played))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _end_hand_later(self, room_id: str, hand_number: int):
        await asyncio.sleep(self.config.next_hand_delay)
        room = self.manager.get_room(room_id)
        if room is None:
            return

        async with self.room_lock(room_id):
            # A new-hand request may already have moved the room on
            if room.hands_played != hand_number or not room.is_settled:
                return
            self.manager.end_hand(room_id)
        logger.info(f"Room {room_id} ready for the next hand")
        await self.broadcast_room_list()

    def _require_seat(self, player_id: str) -> Room:
        room = self.manager.get_room_by_player(player_id)
        if room is None:
            raise PokerError("Not in a room")
        return room


def _schema_message(error: SchemaError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid message")


async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for game communication.

    Protocol:
    1. Client connects; server sends {"type": "connected", "data": {"player_id": ...}}
    2. Client sends create-room or join-room
    3. Client sends start-game, then player-action messages
    4. Server pushes personalised state after every change
    """
    hub: ConnectionManager = websocket.app.state.hub
    player_id = await hub.connect(websocket)

    try:
        while True:
            message = await websocket.receive_json()
            await hub.handle_message(player_id, message)
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: {player_id}")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        await hub.disconnect(player_id)
