"""Room endpoints - exits, navigation and picking up items."""

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from progression.db.database import get_db
from progression.db.redis import get_redis
from progression.schemas.room import (
    ChangeRoomRequest,
    ChangeRoomResponse,
    PickItemRequest,
    PickItemResponse,
    RoomExitsResponse,
)
from progression.services.operation_service import run_player_operation
from progression.services.room_service import room_service
from progression.services.session_service import session_service

router = APIRouter()


@router.get("/exits", response_model=RoomExitsResponse)
async def list_exits(player_id: int, db: AsyncSession = Depends(get_db)):
    """Exits of the current room with their evaluated unlock status."""
    player = await session_service.require(db, player_id)
    return room_service.list_exits(player)


@router.post("/change", response_model=ChangeRoomResponse)
async def change_room(
    req: ChangeRoomRequest,
    player_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    idempotency_key: str | None = Header(default=None, max_length=100),
):
    """Walk through an exit. A locked exit is reported, not raised."""
    return await run_player_operation(
        db, redis, player_id, "change_room",
        lambda player: room_service.transition(db, player, req.exit_id),
        response_model=ChangeRoomResponse, request_id=idempotency_key,
    )


@router.post("/pick", response_model=PickItemResponse)
async def pick_item(
    req: PickItemRequest,
    player_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    return await run_player_operation(
        db, redis, player_id, "pick_item",
        lambda player: room_service.pick_item(db, player, req.item_id),
        response_model=PickItemResponse,
    )
