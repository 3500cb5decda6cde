"""Room navigation schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from progression.schemas.notification import Notification

Condition = Literal["is_locked", "required_level", "required_items", "required_puzzles"]


class UnmetCondition(BaseModel):
    condition: Condition
    required: Any
    missing: Any = None


class ChangeRoomRequest(BaseModel):
    exit_id: str


class ChangeRoomResponse(BaseModel):
    success: bool
    new_room_id: str | None = None
    current_room_id: str
    reason: Condition | None = None  # first unmet condition
    unmet: list[UnmetCondition] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)


class ExitStatus(BaseModel):
    exit_id: str
    name: str
    target_room_id: str
    is_unlocked: bool
    unmet: list[UnmetCondition] = Field(default_factory=list)


class RoomExitsResponse(BaseModel):
    current_room_id: str
    exits: list[ExitStatus]


class PickItemRequest(BaseModel):
    item_id: str


class PickItemResponse(BaseModel):
    item_id: str
    picked: bool  # False when already held
    quantity: int
