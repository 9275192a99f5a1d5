"""
backend/app/services/events.py

Booking event publisher: pushes settlement events to a Redis list for
consumption by notification workers.

Queue:
- events:p2p — instant delivery (booking notifications to specific users)

Publishing happens after the settlement transaction committed; a failure
here is logged and never undoes the booking.
"""

import json
import time
import logging
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


class BookingEventPublisher:
    """Emits booking lifecycle events; logs only when no Redis is configured."""

    def __init__(self, redis: Optional[Redis] = None, queue: str = P2P_QUEUE):
        self.redis = redis
        self.queue = queue

    def emit(self, event_type: str, payload: dict) -> None:
        event = {
            "type": event_type,
            **payload,
            "ts": int(time.time()),
        }
        if self.redis is None:
            logger.info(f"Event {event_type} (no queue configured): {payload}")
            return
        try:
            self.redis.rpush(self.queue, json.dumps(event, default=str))
            logger.info(f"Event emitted: {event_type} → {self.queue}")
        except RedisError as e:
            logger.error(f"Failed to emit event {event_type}: {e}")
