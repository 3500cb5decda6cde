"""Tests for the reward ledger - balances always equal the fold of the run's entries."""

from decimal import Decimal

import pytest

from progression.core.errors import InvalidRequestError
from progression.models.reward import KIND_BITCOIN, KIND_EXP
from progression.services.reward_service import reward_service
from progression.services.session_service import session_service


async def test_fold_matches_balances(db, player):
    await reward_service.apply(db, player, "puzzle:a", KIND_BITCOIN, Decimal("0.01"))
    await reward_service.apply(db, player, "mission:b", KIND_BITCOIN, Decimal("0.25"))
    await reward_service.apply(db, player, "mission:b", KIND_EXP, 150)

    totals = await reward_service.fold(db, player)
    assert totals[KIND_BITCOIN] == Decimal("0.26")
    assert totals[KIND_EXP] == Decimal("150")

    summary = await reward_service.reconcile(db, player)
    assert summary.is_consistent
    assert summary.folded_bitcoins == Decimal("0.26")
    assert summary.experience_points == 150
    assert len(summary.entries) == 3


async def test_duplicate_grant_is_ignored(db, player):
    first = await reward_service.apply(db, player, "mission:b", KIND_BITCOIN, Decimal("0.25"))
    second = await reward_service.apply(db, player, "mission:b", KIND_BITCOIN, Decimal("0.25"))

    assert first is not None
    assert second is None
    assert Decimal(player.bitcoin_balance) == Decimal("0.25")


def test_level_follows_experience():
    assert reward_service.level_for(0) == 1
    assert reward_service.level_for(99) == 1
    assert reward_service.level_for(250) == 3


async def test_invalid_grants(db, player):
    with pytest.raises(InvalidRequestError):
        await reward_service.apply(db, player, "x", "gems", 1)
    with pytest.raises(InvalidRequestError):
        await reward_service.apply(db, player, "x", KIND_BITCOIN, 0)
    with pytest.raises(InvalidRequestError):
        await reward_service.apply(db, player, "x", KIND_EXP, Decimal("1.5"))


async def test_new_run_starts_an_empty_ledger(db, player):
    await reward_service.apply(db, player, "mission:b", KIND_BITCOIN, Decimal("0.25"))
    await session_service.new_game(db, player)

    summary = await reward_service.reconcile(db, player)
    assert summary.entries == []
    assert summary.is_consistent

    # The same source can pay out again in the new run
    again = await reward_service.apply(db, player, "mission:b", KIND_BITCOIN, Decimal("0.25"))
    assert again is not None
    assert Decimal(player.bitcoin_balance) == Decimal("0.25")
