"""Tests for the mission service - resume position and exactly-once rewards."""

from decimal import Decimal

import pytest

from progression.core.errors import ContentError, MissionIncompleteError, NotFoundError
from progression.services.catalog_service import CatalogService
from progression.services.mission_service import MissionService, mission_service
from progression.services.puzzle_service import puzzle_service


async def test_resume_at_first_unsolved_step(db, player):
    progress = mission_service.resume(player, "mission_001")
    assert progress.current_step == 1
    assert progress.step_id == "scan"
    assert progress.pending_puzzles == ["intro_terminal", "router_password"]

    await puzzle_service.solve(db, player, "intro_terminal", "ls")
    progress = mission_service.resume(player, "mission_001")
    assert progress.step_id == "breach"


async def test_resume_at_last_step_when_all_solved(db, player):
    await puzzle_service.solve(db, player, "intro_terminal", "ls")
    await puzzle_service.solve(db, player, "router_password", "admin")
    progress = mission_service.resume(player, "mission_001")
    assert progress.step_id == "debrief"
    assert progress.pending_puzzles == []


async def test_advance_is_clamped_to_solved_puzzles(db, player):
    """Asking to skip ahead lands on the first step still gated by a puzzle."""
    result = await mission_service.advance(db, player, "mission_001", "debrief")
    assert result.step_id == "scan"
    assert result.is_completed is False
    assert result.reward is None


async def test_advance_unknown_step(db, player):
    with pytest.raises(NotFoundError):
        await mission_service.advance(db, player, "mission_001", "nope")


async def test_mission_reward_applied_once(db, player):
    await puzzle_service.solve(db, player, "firewall_quiz", "B")
    await puzzle_service.solve(db, player, "vault_code", "X7-ALPHA")
    exp_before = player.experience_points

    first = await mission_service.complete(db, player, "mission_002")
    assert first.already_completed is False
    assert first.reward_bitcoins == Decimal("0.25")
    assert first.reward_exp == 300
    assert [n.type for n in first.notifications] == ["mission_completed"]
    assert player.has_completed_mission("mission_002")
    assert Decimal(player.bitcoin_balance) == Decimal("0.25")
    assert player.experience_points == exp_before + 300

    second = await mission_service.complete(db, player, "mission_002")
    assert second.already_completed is True
    assert second.reward_bitcoins == Decimal("0.25")
    assert second.reward_exp == 300
    assert second.notifications == []
    assert Decimal(player.bitcoin_balance) == Decimal("0.25")
    assert player.experience_points == exp_before + 300


async def test_advance_completes_mission_when_eligible(db, player):
    await puzzle_service.solve(db, player, "sequence_lock", "32")
    await puzzle_service.solve(db, player, "logic_gate", "1011")

    result = await mission_service.advance(db, player, "mission_003", "gate")
    assert result.is_completed is True
    assert result.reward.reward_exp == 500
    assert player.has_completed_mission("mission_003")


async def test_experience_raises_level(db, player):
    await puzzle_service.solve(db, player, "sequence_lock", "32")
    await puzzle_service.solve(db, player, "logic_gate", "1011")
    await mission_service.complete(db, player, "mission_003")
    # 80 + 90 + 500 XP
    assert player.experience_points == 670
    assert player.level == 7


async def test_complete_with_pending_puzzles(db, player):
    await puzzle_service.solve(db, player, "firewall_quiz", "B")
    with pytest.raises(MissionIncompleteError) as exc:
        await mission_service.complete(db, player, "mission_002")
    assert exc.value.details["pending_puzzles"] == ["vault_code"]
    assert Decimal(player.bitcoin_balance) == Decimal("0")


async def test_mission_with_unknown_puzzle(db, player, tmp_path):
    (tmp_path / "puzzles.yaml").write_text("{}\n")
    (tmp_path / "missions.yaml").write_text(
        "broken:\n  steps:\n    - id: s1\n      puzzle_id: ghost\n"
    )
    (tmp_path / "rooms.yaml").write_text("{}\n")
    service = MissionService(CatalogService(tmp_path))

    with pytest.raises(ContentError):
        service.resume(player, "broken")
    with pytest.raises(ContentError):
        await service.complete(db, player, "broken")
