"""Reward endpoints - ledger entries and balance reconciliation."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from progression.db.database import get_db
from progression.schemas.reward import LedgerSummary
from progression.services.reward_service import reward_service
from progression.services.session_service import session_service

router = APIRouter()


@router.get("/{player_id}", response_model=LedgerSummary)
async def get_ledger(player_id: int, db: AsyncSession = Depends(get_db)):
    """Current run's ledger and whether the balances match its fold."""
    player = await session_service.require(db, player_id)
    return await reward_service.reconcile(db, player)
