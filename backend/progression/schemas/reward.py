"""Reward ledger schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class LedgerEntry(BaseModel):
    source_id: str
    kind: str
    amount: Decimal
    applied_at: datetime | None = None

    model_config = {"from_attributes": True}


class LedgerSummary(BaseModel):
    player_id: int
    run: int
    bitcoin_balance: Decimal
    experience_points: int
    folded_bitcoins: Decimal
    folded_exp: int
    is_consistent: bool
    entries: list[LedgerEntry] = Field(default_factory=list)
