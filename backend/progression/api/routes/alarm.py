"""Alarm endpoints - query status and history, explicit reset."""

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from progression.db.database import get_db
from progression.db.redis import get_redis
from progression.schemas.alarm import AlarmResetResponse, AlarmStatus
from progression.services.alarm_service import alarm_service
from progression.services.operation_service import run_player_operation
from progression.services.session_service import session_service

router = APIRouter()


@router.get("/{player_id}", response_model=AlarmStatus)
async def get_alarm_status(
    player_id: int,
    limit: int | None = Query(default=None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    player = await session_service.require(db, player_id)
    return await alarm_service.status(db, player, limit=limit)


@router.post("/{player_id}/reset", response_model=AlarmResetResponse)
async def reset_alarm(
    player_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    return await run_player_operation(
        db, redis, player_id, "reset_alarm",
        lambda player: alarm_service.reset(db, player),
        response_model=AlarmResetResponse,
    )
