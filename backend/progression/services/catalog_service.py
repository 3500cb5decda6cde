"""Catalog service - read-only lookup of puzzle, mission and room definitions.

The catalog is authored out-of-band as YAML (one file per kind, keyed by id)
and cached in-process after the first load.
"""

from pathlib import Path

import yaml

from progression.config import settings
from progression.core.answer_checker import SUPPORTED_HASHES
from progression.core.errors import NotFoundError
from progression.schemas.catalog import MissionDefinition, PuzzleDefinition, RoomDefinition

PUZZLES_FILE = "puzzles.yaml"
MISSIONS_FILE = "missions.yaml"
ROOMS_FILE = "rooms.yaml"


class CatalogService:
    def __init__(self, data_dir: Path | None = None):
        self.data_dir = Path(data_dir) if data_dir is not None else Path(settings.CATALOG_DIR)
        self._puzzles: dict[str, PuzzleDefinition] | None = None
        self._missions: dict[str, MissionDefinition] | None = None
        self._rooms: dict[str, RoomDefinition] | None = None

    def _read(self, filename: str) -> dict:
        file_path = self.data_dir / filename
        if not file_path.exists():
            raise FileNotFoundError(f"Catalog file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return raw

    @property
    def puzzles(self) -> dict[str, PuzzleDefinition]:
        if self._puzzles is None:
            raw = self._read(PUZZLES_FILE)
            self._puzzles = {pid: PuzzleDefinition(id=pid, **data) for pid, data in raw.items()}
        return self._puzzles

    @property
    def missions(self) -> dict[str, MissionDefinition]:
        if self._missions is None:
            raw = self._read(MISSIONS_FILE)
            self._missions = {mid: MissionDefinition(id=mid, **data) for mid, data in raw.items()}
        return self._missions

    @property
    def rooms(self) -> dict[str, RoomDefinition]:
        if self._rooms is None:
            raw = self._read(ROOMS_FILE)
            self._rooms = {rid: RoomDefinition(id=rid, **data) for rid, data in raw.items()}
        return self._rooms

    def get_puzzle(self, puzzle_id: str) -> PuzzleDefinition:
        puzzle = self.puzzles.get(puzzle_id)
        if puzzle is None:
            raise NotFoundError(f"Puzzle not found: {puzzle_id}", puzzle_id=puzzle_id)
        return puzzle

    def get_mission(self, mission_id: str) -> MissionDefinition:
        mission = self.missions.get(mission_id)
        if mission is None:
            raise NotFoundError(f"Mission not found: {mission_id}", mission_id=mission_id)
        return mission

    def get_room(self, room_id: str) -> RoomDefinition:
        room = self.rooms.get(room_id)
        if room is None:
            raise NotFoundError(f"Room not found: {room_id}", room_id=room_id)
        return room

    def list_puzzles(self, room_id: str | None = None) -> list[PuzzleDefinition]:
        puzzles = list(self.puzzles.values())
        if room_id is not None:
            puzzles = [p for p in puzzles if p.room_id == room_id]
        return puzzles

    def list_missions(self) -> list[MissionDefinition]:
        return list(self.missions.values())

    def list_rooms(self) -> list[RoomDefinition]:
        return list(self.rooms.values())

    def validate(self) -> list[str]:
        """Return a description of every dangling reference or unusable solution in the catalog."""
        problems = []
        for puzzle in self.puzzles.values():
            hash_type = puzzle.solution.get("hash_type")
            if hash_type and hash_type not in SUPPORTED_HASHES:
                problems.append(f"puzzle {puzzle.id} uses unsupported hash type {hash_type}")
            if puzzle.is_multi_question and not puzzle.question_ids:
                problems.append(f"puzzle {puzzle.id} is multi_question but defines no questions")
        for mission in self.missions.values():
            for step in mission.steps:
                if step.puzzle_id and step.puzzle_id not in self.puzzles:
                    problems.append(
                        f"mission {mission.id} step {step.id} references unknown puzzle {step.puzzle_id}"
                    )
        for room in self.rooms.values():
            for puzzle_id in room.required_puzzles:
                if puzzle_id not in self.puzzles:
                    problems.append(f"room {room.id} requires unknown puzzle {puzzle_id}")
            for exit_id, exit_def in room.exits.items():
                if exit_def.target_room_id not in self.rooms:
                    problems.append(
                        f"room {room.id} exit {exit_id} targets unknown room {exit_def.target_room_id}"
                    )
                for puzzle_id in exit_def.required_puzzles:
                    if puzzle_id not in self.puzzles:
                        problems.append(f"room {room.id} exit {exit_id} requires unknown puzzle {puzzle_id}")
        return problems

    def clear_cache(self) -> None:
        self._puzzles = None
        self._missions = None
        self._rooms = None


catalog_service = CatalogService()
