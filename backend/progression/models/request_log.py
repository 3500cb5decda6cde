"""Processed request model - stored outcomes for replaying duplicate submissions."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from progression.db.database import Base


class ProcessedRequest(Base):
    __tablename__ = "processed_requests"
    __table_args__ = (UniqueConstraint("player_id", "request_id", name="uq_processed_player_request"),)
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("player_sessions.id", ondelete="CASCADE"))
    request_id: Mapped[str] = mapped_column(String(100))
    operation: Mapped[str] = mapped_column(String(50))
    response: Mapped[dict] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
