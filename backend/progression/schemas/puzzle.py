"""Puzzle-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from progression.schemas.notification import Notification


class SolvePuzzleRequest(BaseModel):
    answer: str = Field(max_length=1000)
    # Required for multi_question puzzles, ignored otherwise
    question_id: str | None = Field(default=None, max_length=100)
    # Client-reported and advisory only
    time_spent: int | None = Field(default=None, ge=0)


class PuzzleRewards(BaseModel):
    exp: int = 0
    bitcoins: Decimal = Decimal("0")
    items: list[str] = Field(default_factory=list)


class SolvePuzzleResponse(BaseModel):
    puzzle_id: str
    is_correct: bool
    attempts: int
    max_attempts: int
    max_attempts_reached: bool = False
    alarm_level_increased: bool = False
    new_alarm_level: int
    is_first_alarm_level: bool = False
    caught: bool = False
    already_completed: bool = False
    time_limit_exceeded: bool = False
    # multi_question puzzles only
    question_id: str | None = None
    answered_questions: list[str] | None = None
    total_questions: int | None = None
    explanation: str | None = None
    message: str
    rewards: PuzzleRewards | None = None
    notifications: list[Notification] = Field(default_factory=list)


class HintResponse(BaseModel):
    puzzle_id: str
    hint: str | None  # None once every hint has been handed out
    hints_used: int
    hints_remaining: int


class ResetAttemptsRequest(BaseModel):
    reason: str = Field(default="manual reset", max_length=500)


class ResetAttemptsResponse(BaseModel):
    ok: bool = True
    puzzle_id: str
    attempts: int
    reason: str


class PuzzleProgress(BaseModel):
    is_completed: bool = False
    attempts: int = 0
    hints_used: int = 0
    best_time_seconds: int | None = None
    answered_questions: list[str] = Field(default_factory=list)
    completed_at: datetime | None = None


class PuzzleView(BaseModel):
    """Client-facing puzzle; never carries the solution."""
    id: str
    room_id: str | None
    name: str
    description: str
    type: str
    max_attempts: int
    time_limit_seconds: int | None
    hint_count: int
    data: dict[str, Any]
    progress: PuzzleProgress
