"""
HTTP API Routes for PokerRoom.

Lobby queries and room creation. Seating and game actions go through the
WebSocket endpoint, which ties them to a connection.
"""

from typing import Dict, Any, List
from fastapi import APIRouter, HTTPException, Request

from pokerroom import __version__
from pokerroom.core.session import SessionManager
from pokerroom.server.schemas import CreateRoomRequest, RoomInfoSchema, RoomSchema

router = APIRouter()


def get_manager(request: Request) -> SessionManager:
    """The SessionManager owned by the running app."""
    return request.app.state.manager


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok", "version": __version__}


@router.get("/rooms", response_model=List[RoomInfoSchema])
async def list_rooms(request: Request) -> List[Dict[str, Any]]:
    """List every open room."""
    manager = get_manager(request)
    return [vars(info) for info in manager.list_rooms()]


@router.post("/rooms", response_model=RoomInfoSchema, status_code=201)
async def create_room(req: CreateRoomRequest, request: Request) -> Dict[str, Any]:
    """
    Create an empty room.

    Players take seats by sending join-room over the WebSocket.
    """
    manager = get_manager(request)
    try:
        room = manager.create_room(
            req.name,
            max_players=req.max_players,
            small_blind=req.small_blind,
            big_blind=req.big_blind,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return vars(room.info())


@router.get("/rooms/{room_id}", response_model=RoomSchema)
async def get_room(room_id: str, request: Request) -> Dict[str, Any]:
    """Room details with seated players."""
    room = get_manager(request).get_room(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return room.to_dict()
