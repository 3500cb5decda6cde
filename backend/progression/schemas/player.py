"""Player session schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SessionState(BaseModel):
    """Read-only snapshot of a player's committed session."""
    id: int
    run: int
    current_room_id: str
    bitcoin_balance: Decimal
    experience_points: int
    level: int
    alarm_level: int
    max_alarm_level_reached: int
    total_alarm_increases: int
    completed_mission_ids: list[str] = Field(default_factory=list)
    completed_puzzle_ids: list[str] = Field(default_factory=list)
    inventory: dict[str, int] = Field(default_factory=dict)
    has_shown_first_alarm_explanation: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class NewGameResponse(BaseModel):
    message: str
    session: SessionState
