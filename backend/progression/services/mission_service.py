"""Mission service - resumable step position and exactly-once mission rewards."""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from progression.core.errors import ContentError, MissionIncompleteError, NotFoundError
from progression.models.player import PlayerSession
from progression.models.reward import KIND_BITCOIN, KIND_EXP
from progression.schemas.catalog import MissionDefinition
from progression.schemas.mission import AdvanceMissionResponse, MissionProgress, MissionReward
from progression.schemas.notification import Notification
from progression.services.catalog_service import CatalogService, catalog_service
from progression.services.reward_service import mission_source, reward_service

logger = logging.getLogger(__name__)


class MissionService:
    def __init__(self, catalog: CatalogService):
        self.catalog = catalog

    def _load(self, mission_id: str) -> MissionDefinition:
        """Fetch a mission and make sure every bound puzzle exists in the catalog."""
        mission = self.catalog.get_mission(mission_id)
        for step in mission.steps:
            if step.puzzle_id and step.puzzle_id not in self.catalog.puzzles:
                raise ContentError(
                    f"Mission {mission.id} step {step.id} references unknown puzzle {step.puzzle_id}",
                    mission_id=mission.id,
                    step_id=step.id,
                    puzzle_id=step.puzzle_id,
                )
        return mission

    @staticmethod
    def pending_puzzles(mission: MissionDefinition, player: PlayerSession) -> list[str]:
        return [pid for pid in mission.bound_puzzle_ids if not player.has_completed_puzzle(pid)]

    @staticmethod
    def resume_index(mission: MissionDefinition, player: PlayerSession) -> int:
        """First step whose bound puzzle is unsolved; the last step once all are solved."""
        for i, step in enumerate(mission.steps):
            if step.puzzle_id and not player.has_completed_puzzle(step.puzzle_id):
                return i
        return len(mission.steps) - 1

    def resume(self, player: PlayerSession, mission_id: str) -> MissionProgress:
        mission = self._load(mission_id)
        index = self.resume_index(mission, player)
        return MissionProgress(
            mission_id=mission.id,
            current_step=index,
            step_id=mission.steps[index].id,
            is_completed=player.has_completed_mission(mission.id),
            pending_puzzles=self.pending_puzzles(mission, player),
        )

    async def advance(
        self, db: AsyncSession, player: PlayerSession, mission_id: str, step_id: str
    ) -> AdvanceMissionResponse:
        """Move to a client-requested step, clamped to what the solved puzzles allow."""
        mission = self._load(mission_id)
        requested = mission.step_index(step_id)
        if requested is None:
            raise NotFoundError(f"Step {step_id} not found in mission {mission.id}", step_id=step_id)

        resume_at = self.resume_index(mission, player)
        current = min(requested, resume_at)
        if current < requested:
            logger.info(
                "Player %s asked for step %s of %s but is gated at step %s",
                player.id, requested, mission.id, resume_at,
            )

        reward = await self.complete_if_eligible(db, player, mission.id)
        return AdvanceMissionResponse(
            mission_id=mission.id,
            current_step=current,
            step_id=mission.steps[current].id,
            is_completed=reward is not None,
            pending_puzzles=self.pending_puzzles(mission, player),
            reward=reward,
            notifications=reward.notifications if reward else [],
        )

    async def complete_if_eligible(
        self, db: AsyncSession, player: PlayerSession, mission_id: str
    ) -> MissionReward | None:
        """Issue the mission reward once every bound puzzle is solved; None otherwise."""
        mission = self._load(mission_id)
        if self.pending_puzzles(mission, player):
            return None
        return await self._issue(db, player, mission)

    async def complete(self, db: AsyncSession, player: PlayerSession, mission_id: str) -> MissionReward:
        mission = self._load(mission_id)
        pending = self.pending_puzzles(mission, player)
        if pending and not player.has_completed_mission(mission.id):
            raise MissionIncompleteError(
                f"Mission {mission.id} is not finished yet", pending_puzzles=pending
            )
        return await self._issue(db, player, mission)

    async def _issue(self, db: AsyncSession, player: PlayerSession, mission: MissionDefinition) -> MissionReward:
        source = mission_source(mission.id)

        if player.has_completed_mission(mission.id):
            recorded = await reward_service.fold(db, player, source_id=source)
            return MissionReward(
                mission_id=mission.id,
                reward_bitcoins=recorded[KIND_BITCOIN],
                reward_exp=int(recorded[KIND_EXP]),
                already_completed=True,
            )

        bitcoins = Decimal("0")
        exp = 0
        if mission.reward_bitcoins > 0 and await reward_service.apply(
            db, player, source, KIND_BITCOIN, mission.reward_bitcoins
        ):
            bitcoins = mission.reward_bitcoins
        if mission.reward_exp > 0 and await reward_service.apply(db, player, source, KIND_EXP, mission.reward_exp):
            exp = mission.reward_exp

        player.mark_mission_completed(mission.id)
        await db.flush()
        logger.info("Player %s completed mission %s (+%s BTC, +%s XP)", player.id, mission.id, bitcoins, exp)

        return MissionReward(
            mission_id=mission.id,
            reward_bitcoins=bitcoins,
            reward_exp=exp,
            already_completed=False,
            notifications=[
                Notification(
                    type="mission_completed",
                    message=f"Mission {mission.name or mission.id} completed",
                    data={"mission_id": mission.id, "bitcoins": str(bitcoins), "exp": exp},
                )
            ],
        )


mission_service = MissionService(catalog_service)
