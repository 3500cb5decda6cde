"""Tests for the alarm service and the caught transition."""

from decimal import Decimal

from progression.core.alarm_machine import AlarmMachine
from progression.models.player import PlayerSession
from progression.services.alarm_service import alarm_service
from progression.services.puzzle_service import puzzle_service
from progression.services.reward_service import reward_service
from progression.services.session_service import session_service


def test_machine_starts_caught_at_ceiling():
    assert AlarmMachine(PlayerSession(alarm_level=10)).is_caught
    assert not AlarmMachine(PlayerSession(alarm_level=3)).is_caught


def test_machine_escalates_to_caught():
    player = PlayerSession(alarm_level=9)
    machine = AlarmMachine(player)
    machine.send("escalate")
    assert machine.is_caught


async def test_increase_is_monotonic_by_one(db, player):
    levels = []
    for _ in range(4):
        outcome = await alarm_service.increase(db, player, "test")
        levels.append(outcome.new_level)
    assert levels == [1, 2, 3, 4]
    assert player.max_alarm_level_reached == 4
    assert player.total_alarm_increases == 4


async def test_first_alarm_explanation_only_once(db, player):
    first = await alarm_service.increase(db, player, "test")
    second = await alarm_service.increase(db, player, "test")

    assert first.is_first_alarm is True
    assert "alarm_explanation" in [n.type for n in first.notifications]
    assert second.is_first_alarm is False
    assert [n.type for n in second.notifications] == ["alarm_increased"]
    assert player.has_shown_first_alarm_explanation is True


async def test_reset_keeps_counters(db, player):
    await alarm_service.increase(db, player, "test")
    await alarm_service.increase(db, player, "test")

    result = await alarm_service.reset(db, player)
    assert result.alarm_level == 0
    assert player.alarm_level == 0
    assert player.max_alarm_level_reached == 2
    assert player.total_alarm_increases == 2


async def test_status_history_newest_first(db, player):
    await alarm_service.increase(db, player, "first", puzzle_id="firewall_quiz")
    await alarm_service.increase(db, player, "second")

    status = await alarm_service.status(db, player)
    assert status.current_alarm_level == 2
    assert [h.reason for h in status.history] == ["second", "first"]
    assert status.history[1].puzzle_id == "firewall_quiz"


async def test_caught_wipes_session(db, player):
    """Ten exhausted puzzles end the run; the next read shows a fresh session."""
    await puzzle_service.solve(db, player, "router_password", "admin")
    assert player.experience_points == 75
    first_run = player.run

    results = [await puzzle_service.solve(db, player, "tripwire_panel", "0000") for _ in range(10)]

    assert [r.new_alarm_level for r in results] == list(range(1, 11))
    assert not any(r.caught for r in results[:9])
    assert results[-1].caught is True
    assert "caught" in [n.type for n in results[-1].notifications]

    state = session_service.snapshot(await session_service.require(db, player.id))
    assert state.alarm_level == 0
    assert state.completed_mission_ids == []
    assert state.completed_puzzle_ids == []
    assert state.bitcoin_balance == Decimal("0")
    assert state.experience_points == 0
    assert state.current_room_id == "intro"
    assert state.run == first_run + 1

    assert await puzzle_service.get_record(db, player.id, "router_password") is None
    summary = await reward_service.reconcile(db, player)
    assert summary.entries == []
    assert summary.is_consistent
