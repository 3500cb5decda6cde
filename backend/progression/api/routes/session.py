"""Session endpoints - start a game, read the committed state, start over."""

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from progression.db.database import get_db
from progression.db.redis import get_redis
from progression.schemas.player import NewGameResponse, SessionState
from progression.services.operation_service import run_player_operation
from progression.services.session_service import session_service

router = APIRouter()


@router.post("/", response_model=SessionState, status_code=201)
async def start_game(db: AsyncSession = Depends(get_db)):
    """Create a new player session with initial values."""
    player = await session_service.start(db)
    return session_service.snapshot(player)


@router.get("/{player_id}", response_model=SessionState)
async def get_session_state(player_id: int, db: AsyncSession = Depends(get_db)):
    """Read-only snapshot of the latest committed state."""
    player = await session_service.require(db, player_id)
    return session_service.snapshot(player)


@router.post("/{player_id}/new-game", response_model=NewGameResponse)
async def new_game(
    player_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    idempotency_key: str | None = Header(default=None, max_length=100),
):
    """Wipe all progress and start a new run (keeps the session id)."""

    async def action(player):
        await session_service.new_game(db, player)
        return NewGameResponse(message="New game started", session=session_service.snapshot(player))

    return await run_player_operation(
        db, redis, player_id, "new_game", action,
        response_model=NewGameResponse, request_id=idempotency_key,
    )
