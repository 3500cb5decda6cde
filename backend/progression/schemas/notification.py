"""Notification schema - declarative events consumed by the presentation layer."""

from typing import Any, Literal

from pydantic import BaseModel, Field

NotificationType = Literal[
    "alarm_increased",
    "alarm_explanation",
    "alarm_reset",
    "caught",
    "puzzle_solved",
    "mission_completed",
    "room_locked",
]


class Notification(BaseModel):
    type: NotificationType
    message: str
    data: dict[str, Any] = Field(default_factory=dict)
