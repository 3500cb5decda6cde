"""Tests for the session module - model, routes and the new-game wipe."""

from decimal import Decimal

from progression.models.player import PlayerSession
from progression.services.puzzle_service import puzzle_service
from progression.services.session_service import session_service


# ---------------------------------------------------------------------------
# Model unit tests (via direct DB session)
# ---------------------------------------------------------------------------


async def test_create_session_default(db):
    """Session created with defaults has expected initial state."""
    player = PlayerSession()
    db.add(player)
    await db.flush()
    await db.refresh(player)

    assert player.id is not None
    assert player.run == 1
    assert player.current_room_id == "intro"
    assert player.level == 1
    assert player.completed_mission_ids == []
    assert player.completed_puzzle_ids == []
    assert player.inventory == {}
    assert Decimal(player.bitcoin_balance) == Decimal("0")
    assert player.alarm_level == 0
    assert player.has_shown_first_alarm_explanation is False
    assert player.version == 1


async def test_reset_progress(db):
    """reset_progress() clears every game field and starts a new run."""
    player = PlayerSession()
    db.add(player)
    await db.flush()

    player.current_room_id = "vault"
    player.level = 4
    player.mark_puzzle_completed("firewall_quiz")
    player.mark_mission_completed("mission_002")
    player.add_item("keycard")
    player.bitcoin_balance = Decimal("0.25")
    player.experience_points = 320
    player.alarm_level = 6
    player.has_shown_first_alarm_explanation = True
    await db.flush()

    player.reset_progress()
    await db.flush()

    assert player.run == 2
    assert player.current_room_id == "intro"
    assert player.level == 1
    assert player.completed_puzzle_ids == []
    assert player.completed_mission_ids == []
    assert player.inventory == {}
    assert player.bitcoin_balance == Decimal("0")
    assert player.experience_points == 0
    assert player.alarm_level == 0
    assert player.has_shown_first_alarm_explanation is False


async def test_version_bumps_on_update(db, player):
    assert player.version == 1
    player.alarm_level = 1
    await db.flush()
    assert player.version == 2


async def test_wipe_drops_attempt_records(db, player):
    await puzzle_service.solve(db, player, "firewall_quiz", "A")
    await session_service.wipe(db, player)

    assert await puzzle_service.get_record(db, player.id, "firewall_quiz") is None


# ---------------------------------------------------------------------------
# Route tests (via HTTP client)
# ---------------------------------------------------------------------------


async def test_start_game(client):
    resp = await client.post("/api/session/")
    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] is not None
    assert data["current_room_id"] == "intro"
    assert data["level"] == 1
    assert data["alarm_level"] == 0
    assert Decimal(data["bitcoin_balance"]) == Decimal("0")


async def test_get_session_state(client):
    create = await client.post("/api/session/")
    player_id = create.json()["id"]

    resp = await client.get(f"/api/session/{player_id}")
    assert resp.status_code == 200
    assert resp.json()["id"] == player_id


async def test_get_session_not_found(client):
    resp = await client.get("/api/session/99999")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


async def test_new_game(client):
    create = await client.post("/api/session/")
    player_id = create.json()["id"]

    await client.post(f"/api/rooms/change?player_id={player_id}", json={"exit_id": "to_hallway"})
    await client.post(
        f"/api/puzzles/firewall_quiz/solve?player_id={player_id}", json={"answer": "B"}
    )

    resp = await client.post(f"/api/session/{player_id}/new-game")
    assert resp.status_code == 200
    session = resp.json()["session"]
    assert session["run"] == 2
    assert session["current_room_id"] == "intro"
    assert session["completed_puzzle_ids"] == []
    assert session["experience_points"] == 0


async def test_health(client):
    resp = await client.get("/health")
    assert resp.json() == {"status": "ok"}
