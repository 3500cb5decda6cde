"""Notification stream - per-player Redis stream the UI reads declarative events from."""

import json
import logging
from collections.abc import Sequence

import redis.asyncio as aioredis

from progression.config import settings
from progression.schemas.notification import Notification

logger = logging.getLogger(__name__)


def stream_key(player_id: int) -> str:
    return f"notifications:player:{player_id}"


async def publish_notifications(
    redis: aioredis.Redis, player_id: int, notifications: Sequence[Notification]
) -> list[str]:
    """Append committed notifications to the player's stream. Returns stream entry ids."""
    ids: list[str] = []
    for note in notifications:
        fields = {
            "type": note.type,
            "message": note.message,
            "data": json.dumps(note.data, ensure_ascii=False, default=str),
        }
        stream_id = await redis.xadd(
            stream_key(player_id),
            fields,
            maxlen=settings.NOTIFICATION_STREAM_MAXLEN,
            approximate=True,
        )
        ids.append(stream_id)
    if ids:
        logger.debug("Published %d notification(s) for player %s", len(ids), player_id)
    return ids


async def read_notifications(redis: aioredis.Redis, player_id: int, count: int = 50) -> list[Notification]:
    """Read the most recent notifications, oldest first."""
    entries = await redis.xrevrange(stream_key(player_id), count=count)
    notes = [
        Notification(type=fields["type"], message=fields["message"], data=json.loads(fields.get("data") or "{}"))
        for _, fields in entries
    ]
    notes.reverse()
    return notes
