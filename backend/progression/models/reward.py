"""Reward ledger model - append-only record of currency and experience grants."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from progression.db.database import Base

KIND_BITCOIN = "bitcoin"
KIND_EXP = "exp"
REWARD_KINDS = (KIND_BITCOIN, KIND_EXP)


class RewardLedgerEntry(Base):
    __tablename__ = "reward_ledger"
    # At most one grant per source and kind within a run. `run` is part of the key
    # because a wipe keeps old rows while a new run may pay the same source again.
    __table_args__ = (
        UniqueConstraint("player_id", "run", "source_id", "kind", name="uq_reward_player_source_kind"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("player_sessions.id", ondelete="CASCADE"))
    run: Mapped[int] = mapped_column(Integer)
    source_id: Mapped[str] = mapped_column(String(150))  # "mission:<id>" or "puzzle:<id>"
    kind: Mapped[str] = mapped_column(String(20))
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 8))

    applied_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
