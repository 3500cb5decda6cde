"""Room service - the navigation gate between rooms.

An exit passes only when its own requirements and the target room's
requirements all hold. A failed transition changes nothing and reports every
unmet condition, the first one (in evaluation order) as the reason.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from progression.core.errors import ContentError, InvalidRequestError, NotFoundError
from progression.models.player import PlayerSession
from progression.schemas.catalog import ExitDefinition, RoomDefinition, UnlockRequirements
from progression.schemas.notification import Notification
from progression.schemas.room import (
    ChangeRoomResponse,
    ExitStatus,
    PickItemResponse,
    RoomExitsResponse,
    UnmetCondition,
)
from progression.services.catalog_service import CatalogService, catalog_service

logger = logging.getLogger(__name__)


def evaluate_requirements(player: PlayerSession, *gates: UnlockRequirements) -> list[UnmetCondition]:
    """Check the conjunction of every gate against the player, in a fixed order."""
    unmet: list[UnmetCondition] = []

    if any(g.is_locked for g in gates):
        unmet.append(UnmetCondition(condition="is_locked", required=False, missing=True))

    required_level = max(g.required_level for g in gates)
    if player.level < required_level:
        unmet.append(UnmetCondition(condition="required_level", required=required_level, missing=player.level))

    inventory = player.inventory or {}
    required_items = [item for g in gates for item in g.required_items]
    missing_items = [item for item in dict.fromkeys(required_items) if item not in inventory]
    if missing_items:
        unmet.append(UnmetCondition(condition="required_items", required=required_items, missing=missing_items))

    required_puzzles = [pid for g in gates for pid in g.required_puzzles]
    missing_puzzles = [pid for pid in dict.fromkeys(required_puzzles) if not player.has_completed_puzzle(pid)]
    if missing_puzzles:
        unmet.append(
            UnmetCondition(condition="required_puzzles", required=required_puzzles, missing=missing_puzzles)
        )

    return unmet


class RoomService:
    def __init__(self, catalog: CatalogService):
        self.catalog = catalog

    def current_room(self, player: PlayerSession) -> RoomDefinition:
        try:
            return self.catalog.get_room(player.current_room_id)
        except NotFoundError as e:
            raise ContentError(f"Player is in unknown room {player.current_room_id}") from e

    def _target(self, room: RoomDefinition, exit_id: str, exit_def: ExitDefinition) -> RoomDefinition:
        try:
            return self.catalog.get_room(exit_def.target_room_id)
        except NotFoundError as e:
            raise ContentError(
                f"Exit {exit_id} of room {room.id} targets unknown room {exit_def.target_room_id}"
            ) from e

    async def transition(self, db: AsyncSession, player: PlayerSession, exit_id: str) -> ChangeRoomResponse:
        room = self.current_room(player)
        exit_def = room.exits.get(exit_id)
        if exit_def is None:
            raise NotFoundError(f"Exit {exit_id} not found in room {room.id}", exit_id=exit_id)
        target = self._target(room, exit_id, exit_def)

        unmet = evaluate_requirements(player, exit_def, target)
        if unmet:
            logger.info("Player %s blocked at %s/%s: %s", player.id, room.id, exit_id, unmet[0].condition)
            return ChangeRoomResponse(
                success=False,
                current_room_id=room.id,
                reason=unmet[0].condition,
                unmet=unmet,
                notifications=[
                    Notification(
                        type="room_locked",
                        message=f"{target.name or target.id} is locked",
                        data={"exit_id": exit_id, "reason": unmet[0].condition},
                    )
                ],
            )

        player.current_room_id = target.id
        await db.flush()
        logger.info("Player %s moved %s -> %s", player.id, room.id, target.id)
        return ChangeRoomResponse(success=True, new_room_id=target.id, current_room_id=target.id)

    def list_exits(self, player: PlayerSession) -> RoomExitsResponse:
        room = self.current_room(player)
        exits = []
        for exit_id, exit_def in room.exits.items():
            target = self._target(room, exit_id, exit_def)
            unmet = evaluate_requirements(player, exit_def, target)
            exits.append(
                ExitStatus(
                    exit_id=exit_id,
                    name=exit_def.name or target.name,
                    target_room_id=target.id,
                    is_unlocked=not unmet,
                    unmet=unmet,
                )
            )
        return RoomExitsResponse(current_room_id=room.id, exits=exits)

    async def pick_item(self, db: AsyncSession, player: PlayerSession, item_id: str) -> PickItemResponse:
        room = self.current_room(player)
        if item_id not in room.items:
            raise InvalidRequestError(f"Item {item_id} is not in room {room.id}", item_id=item_id)

        inventory = player.inventory or {}
        if item_id in inventory:
            return PickItemResponse(item_id=item_id, picked=False, quantity=inventory[item_id])

        player.add_item(item_id)
        await db.flush()
        logger.info("Player %s picked up %s in %s", player.id, item_id, room.id)
        return PickItemResponse(item_id=item_id, picked=True, quantity=player.inventory[item_id])


room_service = RoomService(catalog_service)
