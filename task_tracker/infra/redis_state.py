from __future__ import annotations

import logging
import os
from functools import lru_cache

from redis import Redis
from redis.exceptions import RedisError

from task_tracker.domain.models import EventEnvelope

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
REDIS_EVENTS_ENABLED = os.getenv("REDIS_EVENTS_ENABLED", "false").lower() in {"1", "true", "yes"}
REDIS_EVENT_CHANNEL = os.getenv("REDIS_EVENT_CHANNEL", "task-events")


@lru_cache(maxsize=1)
def get_redis() -> Redis:
    return Redis.from_url(REDIS_URL, decode_responses=True)


def check_redis_ready() -> bool:
    try:
        return bool(get_redis().ping())
    except RedisError:
        logger.warning("redis readiness check failed", exc_info=True)
        return False


class RedisEventForwarder:
    """Event bus subscriber that relays every event onto a Redis pub/sub channel."""

    def __init__(self, client: Redis | None = None, channel: str = REDIS_EVENT_CHANNEL) -> None:
        self._client = client
        self.channel = channel

    @property
    def client(self) -> Redis:
        return self._client if self._client is not None else get_redis()

    def __call__(self, event: EventEnvelope) -> None:
        receivers = self.client.publish(self.channel, event.model_dump_json())
        logger.debug(
            "relayed %s event %s to %s (%s receivers)",
            event.event_type,
            event.event_id,
            self.channel,
            receivers,
        )
