"""Reward service - the append-only ledger that is the source of truth for balances."""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progression.config import settings
from progression.core.errors import InvalidRequestError
from progression.models.player import PlayerSession
from progression.models.reward import KIND_BITCOIN, KIND_EXP, REWARD_KINDS, RewardLedgerEntry
from progression.schemas.reward import LedgerEntry, LedgerSummary

logger = logging.getLogger(__name__)

SATOSHI = Decimal("0.00000001")


def mission_source(mission_id: str) -> str:
    return f"mission:{mission_id}"


def puzzle_source(puzzle_id: str) -> str:
    return f"puzzle:{puzzle_id}"


class RewardService:
    @staticmethod
    def level_for(experience_points: int) -> int:
        """Level derived from experience: one level per EXP_PER_LEVEL points."""
        return settings.START_LEVEL + experience_points // settings.EXP_PER_LEVEL

    @staticmethod
    async def find(
        db: AsyncSession, player: PlayerSession, source_id: str, kind: str
    ) -> RewardLedgerEntry | None:
        result = await db.execute(
            select(RewardLedgerEntry).where(
                RewardLedgerEntry.player_id == player.id,
                RewardLedgerEntry.run == player.run,
                RewardLedgerEntry.source_id == source_id,
                RewardLedgerEntry.kind == kind,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def apply(
        db: AsyncSession,
        player: PlayerSession,
        source_id: str,
        kind: str,
        amount: Decimal | int,
    ) -> RewardLedgerEntry | None:
        """Append a grant and update the matching balance.

        Returns None without touching anything when this (source, kind) was
        already granted in the current run.
        """
        if kind not in REWARD_KINDS:
            raise InvalidRequestError(f"Unknown reward kind: {kind}")
        amount = Decimal(str(amount))
        if amount <= 0:
            raise InvalidRequestError("Reward amount must be positive")
        if kind == KIND_EXP and amount != amount.to_integral_value():
            raise InvalidRequestError("Experience rewards must be whole numbers")

        if await RewardService.find(db, player, source_id, kind) is not None:
            logger.info("Reward %s/%s already applied for player %s", source_id, kind, player.id)
            return None

        entry = RewardLedgerEntry(
            player_id=player.id,
            run=player.run,
            source_id=source_id,
            kind=kind,
            amount=amount,
        )
        db.add(entry)

        if kind == KIND_BITCOIN:
            player.bitcoin_balance = Decimal(player.bitcoin_balance or 0) + amount
        else:
            player.experience_points = (player.experience_points or 0) + int(amount)
            player.level = max(player.level, RewardService.level_for(player.experience_points))

        await db.flush()
        logger.info("Applied %s %s from %s to player %s", amount, kind, source_id, player.id)
        return entry

    @staticmethod
    async def entries(db: AsyncSession, player: PlayerSession) -> list[RewardLedgerEntry]:
        result = await db.execute(
            select(RewardLedgerEntry)
            .where(RewardLedgerEntry.player_id == player.id, RewardLedgerEntry.run == player.run)
            .order_by(RewardLedgerEntry.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def fold(db: AsyncSession, player: PlayerSession, source_id: str | None = None) -> dict[str, Decimal]:
        """Sum this run's entries per kind, optionally for a single source."""
        totals = {KIND_BITCOIN: Decimal("0"), KIND_EXP: Decimal("0")}
        for entry in await RewardService.entries(db, player):
            if source_id is None or entry.source_id == source_id:
                totals[entry.kind] += Decimal(entry.amount)
        return totals

    @staticmethod
    async def reconcile(db: AsyncSession, player: PlayerSession) -> LedgerSummary:
        entries = await RewardService.entries(db, player)
        folded_btc = sum((Decimal(e.amount) for e in entries if e.kind == KIND_BITCOIN), Decimal("0"))
        folded_exp = int(sum((Decimal(e.amount) for e in entries if e.kind == KIND_EXP), Decimal("0")))
        balance = Decimal(player.bitcoin_balance or 0)
        return LedgerSummary(
            player_id=player.id,
            run=player.run,
            bitcoin_balance=balance,
            experience_points=player.experience_points,
            folded_bitcoins=folded_btc,
            folded_exp=folded_exp,
            is_consistent=(
                balance.quantize(SATOSHI) == folded_btc.quantize(SATOSHI)
                and player.experience_points == folded_exp
            ),
            entries=[LedgerEntry.model_validate(e) for e in entries],
        )


reward_service = RewardService()
