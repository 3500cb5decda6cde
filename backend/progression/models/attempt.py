"""Attempt record model - per (player, puzzle) attempt counter and completion marker."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from progression.db.database import Base


class AttemptRecord(Base):
    __tablename__ = "puzzle_attempts"
    __table_args__ = (UniqueConstraint("player_id", "puzzle_id", name="uq_attempt_player_puzzle"),)
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("player_sessions.id", ondelete="CASCADE"))
    puzzle_id: Mapped[str] = mapped_column(String(100))

    attempts: Mapped[int] = mapped_column(Integer, default=0)
    hints_used: Mapped[int] = mapped_column(Integer, default=0)
    best_time_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # multi_question puzzles: ids of the questions answered correctly so far
    answered_questions: Mapped[list] = mapped_column(JSON, default=list)

    # Once set, never changes; gates every later submission
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def has_answered(self, question_id: str) -> bool:
        return question_id in (self.answered_questions or [])

    def mark_answered(self, question_id: str) -> None:
        # Reassign so the JSON column is flagged dirty
        if not self.has_answered(question_id):
            self.answered_questions = [*(self.answered_questions or []), question_id]
