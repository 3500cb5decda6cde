"""Per-player mutex backed by Redis.

Every mutating operation holds this lock for the duration of one logical
operation, commit included. Different players never contend.
"""

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import LockNotOwnedError

from progression.config import settings
from progression.core.errors import ConcurrencyConflictError

logger = logging.getLogger(__name__)


def lock_key(player_id: int) -> str:
    return f"lock:player:{player_id}"


@asynccontextmanager
async def player_lock(
    redis: aioredis.Redis,
    player_id: int,
    *,
    ttl_ms: int | None = None,
    retries: int | None = None,
    retry_delay: float | None = None,
):
    """Hold the player's lock or raise ConcurrencyConflictError.

    Release goes through redis-py's token-checked Lua script, so a holder
    whose lock expired and was taken over leaves the new holder's lock alone.
    """
    ttl_ms = settings.PLAYER_LOCK_TTL_MS if ttl_ms is None else ttl_ms
    retries = settings.PLAYER_LOCK_RETRIES if retries is None else retries
    retry_delay = settings.PLAYER_LOCK_RETRY_DELAY if retry_delay is None else retry_delay

    lock = redis.lock(
        lock_key(player_id),
        timeout=ttl_ms / 1000,
        sleep=retry_delay,
        blocking=retries > 0,
        blocking_timeout=retry_delay * retries,
        thread_local=False,
    )

    if not await lock.acquire():
        logger.warning("Player %s is busy; rejecting overlapping operation", player_id)
        raise ConcurrencyConflictError("Player is busy with another operation, retry the request")

    try:
        yield lock
    finally:
        try:
            await lock.release()
        except LockNotOwnedError:
            logger.warning("Lock for player %s expired before release and is now held elsewhere", player_id)
