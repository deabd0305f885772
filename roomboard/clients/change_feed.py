"""Redis pub/sub feed of room row changes."""

import json
from collections.abc import AsyncIterator
from typing import Any, Optional

import redis.asyncio as redis
from pydantic import ValidationError
from structlog import get_logger

from roomboard.config import settings
from roomboard.models import Room
from roomboard.transformers import RowTransformer

logger = get_logger(__name__)


class RoomChangeFeed:
    """Publishes committed room rows and streams changes made elsewhere.

    Message format: {"table": "rooms", "type": "UPDATE", "record": {...row}}.
    Every board instance publishes what it commits and listens for the
    rest, so a client also receives its own writes back.
    """

    TABLE = "rooms"

    def __init__(self):
        """Initialize Redis client for the change channel."""
        self.channel = settings.redis.channel
        self.redis_client = redis.Redis(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            password=settings.redis.password,
            ssl=settings.redis.ssl,
            decode_responses=settings.redis.decode_responses,
            socket_timeout=settings.redis.socket_timeout,
            socket_connect_timeout=settings.redis.socket_connect_timeout,
        )

    async def publish(self, room: Room, change_type: str = "UPDATE") -> None:
        """Publish a room row on the change channel.

        Args:
            room: Room as committed to the backend
            change_type: INSERT or UPDATE
        """
        message = json.dumps(
            {
                "table": self.TABLE,
                "type": change_type,
                "record": RowTransformer.room_to_row(room),
            }
        )
        try:
            receivers = await self.redis_client.publish(self.channel, message)
            logger.debug(
                "Published room change",
                room_id=room.id,
                channel=self.channel,
                receivers=receivers,
            )
        except Exception as e:
            logger.warning(
                "Failed to publish room change (backend write already committed)",
                room_id=room.id,
                error=str(e),
            )
            # Don't raise - the row is stored, only the notification is lost

    @classmethod
    def parse_message(cls, data: Any) -> Optional[Room]:
        """Parse one channel payload into a Room.

        Args:
            data: Raw message data from Redis

        Returns:
            The changed room, or None for foreign or malformed messages
        """
        try:
            payload = json.loads(data)
            if payload.get("table") != cls.TABLE:
                return None
            return Room.model_validate(payload["record"])
        except (TypeError, KeyError, AttributeError, ValueError, ValidationError) as e:
            logger.warning(
                "Skipping malformed room change message",
                data=str(data)[:100],
                error=str(e),
            )
            return None

    async def listen(self) -> AsyncIterator[Room]:
        """Yield rooms as change messages arrive.

        Runs until cancelled.
        """
        pubsub = self.redis_client.pubsub()
        await pubsub.subscribe(self.channel)
        logger.info("Subscribed to room changes", channel=self.channel)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                room = self.parse_message(message.get("data"))
                if room is not None:
                    yield room
        finally:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
            logger.info("Unsubscribed from room changes", channel=self.channel)

    async def close(self) -> None:
        """Close Redis connection.

        Should be called when the feed is no longer needed.
        """
        try:
            await self.redis_client.aclose()
            logger.debug("Closed Redis connection")
        except Exception as e:
            logger.warning("Error closing Redis connection", error=str(e))
