"""Operation service - runs one mutating game operation for one player, all-or-nothing.

Order of events for every mutation:
    player lock -> replay lookup -> action -> replay record -> commit
    -> publish notifications -> unlock
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import redis.asyncio as aioredis
from pydantic import BaseModel
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from progression.core.errors import ConcurrencyConflictError, IdempotencyKeyReusedError
from progression.core.notifications import publish_notifications
from progression.core.player_lock import player_lock
from progression.models.player import PlayerSession
from progression.models.request_log import ProcessedRequest
from progression.services.session_service import session_service

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


async def find_processed(db: AsyncSession, player_id: int, request_id: str) -> ProcessedRequest | None:
    result = await db.execute(
        select(ProcessedRequest).where(
            ProcessedRequest.player_id == player_id, ProcessedRequest.request_id == request_id
        )
    )
    return result.scalar_one_or_none()


async def run_player_operation(
    db: AsyncSession,
    redis: aioredis.Redis,
    player_id: int,
    operation: str,
    action: Callable[[PlayerSession], Awaitable[ResultT]],
    *,
    response_model: type[ResultT],
    request_id: str | None = None,
) -> ResultT:
    """Run ``action`` under the player's lock inside a single transaction.

    A repeated ``request_id`` answers with the stored outcome instead of
    running the action again.
    """
    async with player_lock(redis, player_id):
        if request_id:
            prior = await find_processed(db, player_id, request_id)
            if prior is not None:
                if prior.operation != operation:
                    raise IdempotencyKeyReusedError(
                        f"Idempotency key already used for {prior.operation}", request_id=request_id
                    )
                logger.info("Replaying %s for player %s (request %s)", operation, player_id, request_id)
                return response_model.model_validate(prior.response)

        try:
            player = await session_service.require(db, player_id, for_update=True)
            result = await action(player)
            if request_id:
                db.add(
                    ProcessedRequest(
                        player_id=player_id,
                        request_id=request_id,
                        operation=operation,
                        response=result.model_dump(mode="json"),
                    )
                )
            await db.commit()
        except (StaleDataError, IntegrityError) as e:
            await db.rollback()
            logger.warning("Concurrent %s for player %s rolled back: %s", operation, player_id, e)
            raise ConcurrencyConflictError("Concurrent update detected, retry the request") from e
        except Exception:
            await db.rollback()
            raise

        notifications = getattr(result, "notifications", None)
        if notifications:
            try:
                await publish_notifications(redis, player_id, notifications)
            except RedisError:
                # Already committed; the response still carries the notifications
                logger.exception("Could not publish notifications for player %s", player_id)

    return result
