"""Mission-related Pydantic schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field

from progression.schemas.notification import Notification


class MissionReward(BaseModel):
    mission_id: str
    reward_bitcoins: Decimal
    reward_exp: int
    already_completed: bool
    notifications: list[Notification] = Field(default_factory=list)


class MissionProgress(BaseModel):
    mission_id: str
    current_step: int
    step_id: str
    is_completed: bool  # reward issued
    pending_puzzles: list[str] = Field(default_factory=list)


class AdvanceMissionRequest(BaseModel):
    step_id: str


class AdvanceMissionResponse(BaseModel):
    mission_id: str
    current_step: int
    step_id: str
    is_completed: bool
    pending_puzzles: list[str] = Field(default_factory=list)
    reward: MissionReward | None = None
    notifications: list[Notification] = Field(default_factory=list)
