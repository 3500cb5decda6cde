"""Session service - the player session store every other service reads and writes through."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from progression.core.errors import NotFoundError
from progression.models.attempt import AttemptRecord
from progression.models.player import PlayerSession
from progression.schemas.player import SessionState

logger = logging.getLogger(__name__)


class SessionService:
    @staticmethod
    async def start(db: AsyncSession) -> PlayerSession:
        """Create a fresh session with initial values (first game start)."""
        player = PlayerSession()
        db.add(player)
        await db.flush()
        await db.refresh(player)
        logger.info("Started session %s in room %s", player.id, player.current_room_id)
        return player

    @staticmethod
    async def get(db: AsyncSession, player_id: int, *, for_update: bool = False) -> PlayerSession | None:
        # populate_existing: always reflect the latest committed row, never the identity map
        stmt = (
            select(PlayerSession)
            .where(PlayerSession.id == player_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def require(db: AsyncSession, player_id: int, *, for_update: bool = False) -> PlayerSession:
        player = await SessionService.get(db, player_id, for_update=for_update)
        if player is None:
            raise NotFoundError("Player not found", player_id=player_id)
        return player

    @staticmethod
    async def wipe(db: AsyncSession, player: PlayerSession) -> None:
        """Reset the session to initial values and drop its attempt records."""
        await db.execute(delete(AttemptRecord).where(AttemptRecord.player_id == player.id))
        player.reset_progress()
        await db.flush()
        logger.info("Wiped session %s, now on run %s", player.id, player.run)

    @staticmethod
    async def new_game(db: AsyncSession, player: PlayerSession) -> PlayerSession:
        await SessionService.wipe(db, player)
        return player

    @staticmethod
    def snapshot(player: PlayerSession) -> SessionState:
        return SessionState.model_validate(player)


session_service = SessionService()
