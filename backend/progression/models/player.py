"""Player session model - the aggregate root for all per-player game state."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from progression.config import settings
from progression.db.database import Base


class PlayerSession(Base):
    __tablename__ = "player_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Bumped by every wipe; ledger entries of older runs no longer count
    run: Mapped[int] = mapped_column(Integer, default=1)

    # Location and progress
    current_room_id: Mapped[str] = mapped_column(String(100), default=lambda: settings.START_ROOM_ID)
    level: Mapped[int] = mapped_column(Integer, default=lambda: settings.START_LEVEL)
    completed_mission_ids: Mapped[list] = mapped_column(JSON, default=list)
    completed_puzzle_ids: Mapped[list] = mapped_column(JSON, default=list)

    # item id -> quantity
    inventory: Mapped[dict] = mapped_column(JSON, default=dict)

    # Balances, always equal to the fold of this run's reward ledger
    bitcoin_balance: Mapped[Decimal] = mapped_column(Numeric(18, 8), default=Decimal("0"))
    experience_points: Mapped[int] = mapped_column(Integer, default=0)

    # Alarm
    alarm_level: Mapped[int] = mapped_column(Integer, default=0)
    max_alarm_level_reached: Mapped[int] = mapped_column(Integer, default=0)
    total_alarm_increases: Mapped[int] = mapped_column(Integer, default=0)
    has_shown_first_alarm_explanation: Mapped[bool] = mapped_column(Boolean, default=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}

    def reset_progress(self) -> None:
        """Put every game field back to its initial value and start a new run."""
        self.run = (self.run or 1) + 1
        self.current_room_id = settings.START_ROOM_ID
        self.level = settings.START_LEVEL
        self.completed_mission_ids = []
        self.completed_puzzle_ids = []
        self.inventory = {}
        self.bitcoin_balance = Decimal("0")
        self.experience_points = 0
        self.alarm_level = 0
        self.max_alarm_level_reached = 0
        self.total_alarm_increases = 0
        self.has_shown_first_alarm_explanation = False

    def has_completed_puzzle(self, puzzle_id: str) -> bool:
        return puzzle_id in (self.completed_puzzle_ids or [])

    def has_completed_mission(self, mission_id: str) -> bool:
        return mission_id in (self.completed_mission_ids or [])

    def mark_puzzle_completed(self, puzzle_id: str) -> None:
        # Reassign so the JSON column is flagged dirty
        if not self.has_completed_puzzle(puzzle_id):
            self.completed_puzzle_ids = [*(self.completed_puzzle_ids or []), puzzle_id]

    def mark_mission_completed(self, mission_id: str) -> None:
        if not self.has_completed_mission(mission_id):
            self.completed_mission_ids = [*(self.completed_mission_ids or []), mission_id]

    def add_item(self, item_id: str, quantity: int = 1) -> None:
        current = dict(self.inventory or {})
        current[item_id] = current.get(item_id, 0) + quantity
        self.inventory = current
