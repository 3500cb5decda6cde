"""Alarm service - escalation, explicit reset and the terminal caught transition."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progression.config import settings
from progression.core.alarm_machine import AlarmMachine
from progression.models.alarm import AlarmEvent
from progression.models.player import PlayerSession
from progression.schemas.alarm import AlarmHistoryItem, AlarmResetResponse, AlarmStatus
from progression.schemas.notification import Notification
from progression.services.session_service import session_service

logger = logging.getLogger(__name__)

FIRST_ALARM_EXPLANATION = (
    "Security noticed you. Every exhausted puzzle raises the alarm level; "
    f"at level {settings.MAX_ALARM_LEVEL} you are caught and the run is over."
)


@dataclass
class AlarmOutcome:
    new_level: int
    is_first_alarm: bool
    caught: bool
    notifications: list[Notification] = field(default_factory=list)


class AlarmService:
    @staticmethod
    async def increase(
        db: AsyncSession,
        player: PlayerSession,
        reason: str,
        *,
        puzzle_id: str | None = None,
        mission_id: str | None = None,
    ) -> AlarmOutcome:
        """Raise the alarm by exactly one level.

        Reaching the ceiling is fatal: the session is wiped in the same
        transaction and only a new game continues from there.
        """
        machine = AlarmMachine(player)
        machine.send("escalate")

        new_level = min((player.alarm_level or 0) + 1, machine.max_level)
        is_first = not player.has_shown_first_alarm_explanation

        player.alarm_level = new_level
        player.max_alarm_level_reached = max(player.max_alarm_level_reached or 0, new_level)
        player.total_alarm_increases = (player.total_alarm_increases or 0) + 1
        db.add(
            AlarmEvent(
                player_id=player.id,
                run=player.run,
                alarm_level=new_level,
                reason=reason,
                puzzle_id=puzzle_id,
                mission_id=mission_id,
            )
        )

        notes = [
            Notification(
                type="alarm_increased",
                message=f"Alarm level raised to {new_level}",
                data={"alarm_level": new_level, "reason": reason, "puzzle_id": puzzle_id},
            )
        ]
        if is_first:
            player.has_shown_first_alarm_explanation = True
            notes.append(Notification(type="alarm_explanation", message=FIRST_ALARM_EXPLANATION))

        await db.flush()
        logger.info("Player %s alarm level %s (%s)", player.id, new_level, reason)

        if machine.is_caught:
            logger.warning("Player %s was caught at alarm level %s; wiping session", player.id, new_level)
            notes.append(
                Notification(
                    type="caught",
                    message="You have been caught. Start a new game to continue.",
                    data={"alarm_level": new_level, "run": player.run},
                )
            )
            await session_service.wipe(db, player)

        return AlarmOutcome(new_level=new_level, is_first_alarm=is_first, caught=machine.is_caught, notifications=notes)

    @staticmethod
    async def reset(db: AsyncSession, player: PlayerSession) -> AlarmResetResponse:
        machine = AlarmMachine(player)
        machine.send("stand_down")

        previous = player.alarm_level
        player.alarm_level = 0
        await db.flush()
        logger.info("Player %s alarm reset from %s to 0", player.id, previous)
        return AlarmResetResponse(
            alarm_level=0,
            notifications=[
                Notification(type="alarm_reset", message="Alarm level reset", data={"previous_level": previous})
            ],
        )

    @staticmethod
    async def status(db: AsyncSession, player: PlayerSession, limit: int | None = None) -> AlarmStatus:
        limit = settings.ALARM_HISTORY_LIMIT if limit is None else limit
        result = await db.execute(
            select(AlarmEvent)
            .where(AlarmEvent.player_id == player.id, AlarmEvent.run == player.run)
            .order_by(AlarmEvent.id.desc())
            .limit(limit)
        )
        return AlarmStatus(
            current_alarm_level=player.alarm_level,
            max_alarm_level_reached=player.max_alarm_level_reached,
            total_alarm_increases=player.total_alarm_increases,
            history=[AlarmHistoryItem.model_validate(e) for e in result.scalars().all()],
        )


alarm_service = AlarmService()
