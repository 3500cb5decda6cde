"""Tests for the catalog service - loading puzzle, mission and room YAML."""

from decimal import Decimal

import pytest

from progression.core.errors import NotFoundError
from progression.services.catalog_service import CatalogService, catalog_service


def test_load_puzzle():
    """Puzzle definitions load with their type-specific solution."""
    puzzle = catalog_service.get_puzzle("vault_code")
    assert puzzle.id == "vault_code"
    assert puzzle.type == "code"
    assert puzzle.max_attempts == 3
    assert puzzle.time_limit_seconds == 60
    assert puzzle.reward_items == ["keycard"]
    assert puzzle.solution["expected_input"] == "X7-ALPHA"


def test_load_mission_steps():
    mission = catalog_service.get_mission("mission_001")
    assert [s.id for s in mission.steps] == ["briefing", "scan", "breach", "debrief"]
    assert mission.bound_puzzle_ids == ["intro_terminal", "router_password"]
    assert mission.reward_bitcoins == Decimal("0.05")
    assert mission.step_index("breach") == 2
    assert mission.step_index("nope") is None


def test_load_room_requirements():
    server_room = catalog_service.get_room("server_room")
    assert server_room.required_items == ["keycard"]
    hallway = catalog_service.get_room("hallway")
    assert hallway.exits["to_vault"].required_puzzles == ["firewall_quiz"]


def test_list_puzzles_by_room():
    ids = {p.id for p in catalog_service.list_puzzles(room_id="intro")}
    assert ids == {"intro_terminal", "router_password"}


def test_catalog_is_cached():
    """The second lookup reuses the parsed definitions."""
    assert catalog_service.puzzles is catalog_service.puzzles


def test_unknown_ids_raise_not_found():
    with pytest.raises(NotFoundError):
        catalog_service.get_puzzle("nonexistent")
    with pytest.raises(NotFoundError):
        catalog_service.get_mission("nonexistent")
    with pytest.raises(NotFoundError):
        catalog_service.get_room("nonexistent")


def test_shipped_catalog_is_consistent():
    assert catalog_service.validate() == []


def test_validate_reports_dangling_references(tmp_path):
    (tmp_path / "puzzles.yaml").write_text("p1:\n  type: logic\n  solution: {solution: '1'}\n")
    (tmp_path / "missions.yaml").write_text(
        "m1:\n  steps:\n    - id: s1\n      puzzle_id: ghost\n"
    )
    (tmp_path / "rooms.yaml").write_text(
        "a:\n  exits:\n    out:\n      target_room_id: nowhere\n"
    )
    problems = CatalogService(tmp_path).validate()
    assert len(problems) == 2
    assert any("ghost" in p for p in problems)
    assert any("nowhere" in p for p in problems)


def test_missing_catalog_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CatalogService(tmp_path).get_puzzle("p1")


def test_validate_reports_unusable_solutions(tmp_path):
    (tmp_path / "puzzles.yaml").write_text(
        "p1:\n  type: password\n  solution: {hash_type: crc32, expected_hash: '00'}\n"
        "p2:\n  type: multi_question\n  solution: {}\n"
    )
    (tmp_path / "missions.yaml").write_text("")
    (tmp_path / "rooms.yaml").write_text("")
    problems = CatalogService(tmp_path).validate()
    assert len(problems) == 2
    assert any("p1" in p and "crc32" in p for p in problems)
    assert any("p2" in p and "no questions" in p for p in problems)


def test_multi_question_puzzle_lists_its_questions():
    puzzle = catalog_service.get_puzzle("incident_review")
    assert puzzle.is_multi_question
    assert puzzle.question_ids == ["q1", "q2"]
