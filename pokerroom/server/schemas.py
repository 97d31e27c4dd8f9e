"""
Pydantic schemas for API request/response validation.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, model_validator

from pokerroom.core.rules import (
    DEFAULT_BIG_BLIND, DEFAULT_BUY_IN, DEFAULT_MAX_PLAYERS, MAX_PLAYERS, MIN_PLAYERS,
)


# ============= Request Schemas =============

class CreateRoomRequest(BaseModel):
    """Request to create a new room."""
    name: str = Field(min_length=1, max_length=64)
    max_players: int = Field(ge=MIN_PLAYERS, le=MAX_PLAYERS, default=DEFAULT_MAX_PLAYERS)
    small_blind: Optional[int] = Field(default=None, ge=0)
    big_blind: int = Field(gt=0, default=DEFAULT_BIG_BLIND)

    @model_validator(mode="after")
    def check_blinds(self):
        if self.small_blind is not None and self.small_blind > self.big_blind:
            raise ValueError("small_blind cannot exceed big_blind")
        return self


class CreateAndJoinRequest(CreateRoomRequest):
    """WebSocket create-room payload: the creator is seated immediately."""
    player_name: str = Field(min_length=1, max_length=32)
    buy_in: int = Field(gt=0, default=DEFAULT_BUY_IN)


class JoinRoomRequest(BaseModel):
    """Request to join a room."""
    room_id: str
    player_name: str = Field(min_length=1, max_length=32)
    buy_in: int = Field(gt=0, default=DEFAULT_BUY_IN)


class ActionRequest(BaseModel):
    """Request to take a game action."""
    action: str = Field(..., description="Action: fold, check, call, raise, all-in")
    amount: Optional[int] = Field(default=None, ge=0, description="New total bet for raise")


# ============= Response Schemas =============

class RoomInfoSchema(BaseModel):
    """Lobby listing entry."""
    id: str
    name: str
    player_count: int
    max_players: int
    is_game_started: bool
    small_blind: int
    big_blind: int


class PlayerPublicSchema(BaseModel):
    """Seated player as shown in a room."""
    id: str
    name: str
    chips: int
    position: int
    is_connected: bool


class RoomSchema(BaseModel):
    """Room with its seated players."""
    id: str
    name: str
    players: List[PlayerPublicSchema]
    max_players: int
    small_blind: int
    big_blind: int
    is_game_started: bool


# ============= WebSocket Message Schemas =============

class WSMessage(BaseModel):
    """Inbound WebSocket envelope: {"type": ..., "data": {...}}."""
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
