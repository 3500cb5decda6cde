"""Mission endpoints - resume position, advance, claim rewards."""

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from progression.db.database import get_db
from progression.db.redis import get_redis
from progression.schemas.mission import (
    AdvanceMissionRequest,
    AdvanceMissionResponse,
    MissionProgress,
    MissionReward,
)
from progression.services.mission_service import mission_service
from progression.services.operation_service import run_player_operation
from progression.services.session_service import session_service

router = APIRouter()


@router.get("/{mission_id}/progress", response_model=MissionProgress)
async def get_mission_progress(mission_id: str, player_id: int, db: AsyncSession = Depends(get_db)):
    """Where the player resumes this mission, computed from solved puzzles."""
    player = await session_service.require(db, player_id)
    return mission_service.resume(player, mission_id)


@router.post("/{mission_id}/advance", response_model=AdvanceMissionResponse)
async def advance_mission(
    mission_id: str,
    req: AdvanceMissionRequest,
    player_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    idempotency_key: str | None = Header(default=None, max_length=100),
):
    return await run_player_operation(
        db, redis, player_id, "advance_mission",
        lambda player: mission_service.advance(db, player, mission_id, req.step_id),
        response_model=AdvanceMissionResponse, request_id=idempotency_key,
    )


@router.post("/{mission_id}/complete", response_model=MissionReward)
async def complete_mission(
    mission_id: str,
    player_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    idempotency_key: str | None = Header(default=None, max_length=100),
):
    """Issue the mission reward once; repeats answer with the recorded amounts."""
    return await run_player_operation(
        db, redis, player_id, "complete_mission",
        lambda player: mission_service.complete(db, player, mission_id),
        response_model=MissionReward, request_id=idempotency_key,
    )
