# backend/provider_calendar/services/slots/invalidator.py
"""
Cache invalidation for materialized days.

Triggers:
✓ Weekly rule created/updated/deleted/replaced → invalidate all dates
✓ Override created/updated/deleted → invalidate the override's date(s)

Does NOT trigger:
✗ Booking created/cancelled (bookings are never cached)
✗ Settings changed (materialized intervals do not depend on settings)
"""

import logging
from datetime import date

from redis import Redis
from redis.exceptions import RedisError

from .redis_store import DayAvailabilityRedisStore

logger = logging.getLogger(__name__)


def invalidate_provider_cache(
    redis: Redis | None,
    provider_id: int,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached days for provider.

    The provider version is bumped first so that a materialization already
    in flight does not write its result back.

    Args:
        redis: Redis client, or None when caching is disabled
        provider_id: Provider ID
        dates: List of specific dates to invalidate,
               or None to invalidate all cached dates

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0

    store = DayAvailabilityRedisStore(redis)
    try:
        store.bump_version(provider_id)
        deleted = store.delete_days(provider_id, dates)
    except RedisError:
        logger.exception("Failed to invalidate availability cache for provider=%s", provider_id)
        return 0

    logger.debug("Invalidated %s cached days for provider=%s", deleted, provider_id)
    return deleted

