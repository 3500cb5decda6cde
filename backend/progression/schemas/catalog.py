"""Catalog schemas - read-only puzzle, mission and room definitions loaded from YAML."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

MULTI_QUESTION = "multi_question"


class PuzzleDefinition(BaseModel):
    """A puzzle as authored in puzzles.yaml.

    ``solution`` holds the type-specific correctness configuration and is never
    sent to clients.
    """
    id: str
    room_id: str | None = None
    name: str = ""
    description: str = ""
    type: str  # multiple_choice, code, password, terminal_command, sequence, logic, multi_question, ...
    max_attempts: int = Field(default=3, ge=1)
    time_limit_seconds: int | None = Field(default=None, ge=1)
    hints: list[str] = Field(default_factory=list)
    solution: dict[str, Any] = Field(default_factory=dict)
    data: dict[str, Any] = Field(default_factory=dict)  # client-facing payload, e.g. choices
    reward_exp: int = Field(default=0, ge=0)
    reward_bitcoins: Decimal = Field(default=Decimal("0"), ge=0)
    reward_items: list[str] = Field(default_factory=list)

    @property
    def is_multi_question(self) -> bool:
        return self.type == MULTI_QUESTION

    @property
    def question_ids(self) -> list[str]:
        return [str(qid) for qid in (self.solution.get("questions") or {})]


class MissionStep(BaseModel):
    id: str
    title: str = ""
    puzzle_id: str | None = None  # None = story step with no gate


class MissionDefinition(BaseModel):
    id: str
    name: str = ""
    description: str = ""
    steps: list[MissionStep] = Field(min_length=1)
    reward_bitcoins: Decimal = Field(default=Decimal("0"), ge=0)
    reward_exp: int = Field(default=0, ge=0)

    def step_index(self, step_id: str) -> int | None:
        for i, step in enumerate(self.steps):
            if step.id == step_id:
                return i
        return None

    @property
    def bound_puzzle_ids(self) -> list[str]:
        return [step.puzzle_id for step in self.steps if step.puzzle_id]


class UnlockRequirements(BaseModel):
    """Conditions shared by exits and rooms; all must hold to pass."""
    is_locked: bool = False
    required_level: int = 0
    required_items: list[str] = Field(default_factory=list)
    required_puzzles: list[str] = Field(default_factory=list)


class ExitDefinition(UnlockRequirements):
    target_room_id: str
    name: str = ""


class RoomDefinition(UnlockRequirements):
    id: str
    name: str = ""
    description: str = ""
    exits: dict[str, ExitDefinition] = Field(default_factory=dict)
    items: list[str] = Field(default_factory=list)  # items that can be picked up here
