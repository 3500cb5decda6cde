"""Alarm-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from progression.schemas.notification import Notification


class AlarmHistoryItem(BaseModel):
    alarm_level: int
    reason: str
    puzzle_id: str | None = None
    mission_id: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class AlarmStatus(BaseModel):
    current_alarm_level: int
    max_alarm_level_reached: int
    total_alarm_increases: int
    history: list[AlarmHistoryItem] = Field(default_factory=list)


class AlarmResetResponse(BaseModel):
    ok: bool = True
    alarm_level: int
    notifications: list[Notification] = Field(default_factory=list)
