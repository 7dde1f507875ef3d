# backend/provider_calendar/services/slots/redis_store.py
"""
Redis storage for materialized days.

Key format: availability:day:{provider_id}:{date}
Value: JSON {"is_open": bool, "intervals": [[start_min, end_min], ...], "reason": str|null}

Version key: availability:version:{provider_id}
Bumped on every invalidation. A writer reads the version before loading
rules and overrides, and its write is dropped if the version moved, so a
computation that raced an edit never lands in the cache.

Only rules and overrides feed these values, never bookings, so a booking
write does not touch the cache.
"""

import json
from datetime import date
from redis import Redis
from redis.exceptions import WatchError

from .entities import DateAvailability, Interval


DEFAULT_TTL_SECONDS = 86400  # 24 hours


def _decode(value):
    return value.decode() if isinstance(value, bytes) else value


def _version(raw) -> int:
    return int(_decode(raw)) if raw is not None else 0


def dump_day(day: DateAvailability) -> str:
    return json.dumps({
        "is_open": day.is_open,
        "intervals": [[i.start, i.end] for i in day.open_intervals],
        "reason": day.reason,
    })


def load_day(target_date: date, raw: str) -> DateAvailability:
    data = json.loads(raw)
    return DateAvailability(
        date=target_date,
        is_open=data["is_open"],
        open_intervals=tuple(Interval(start, end) for start, end in data["intervals"]),
        reason=data.get("reason"),
    )


class DayAvailabilityRedisStore:
    """Redis storage wrapper for per-date open intervals."""

    KEY_PREFIX = "availability:day"
    VERSION_PREFIX = "availability:version"

    def __init__(self, redis: Redis, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _key(self, provider_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{provider_id}:{dt.isoformat()}"

    def _version_key(self, provider_id: int) -> str:
        return f"{self.VERSION_PREFIX}:{provider_id}"

    # ── Version ──────────────────────────────────────────────────────────

    def get_version(self, provider_id: int) -> int:
        return _version(self.redis.get(self._version_key(provider_id)))

    def bump_version(self, provider_id: int) -> int:
        return self.redis.incr(self._version_key(provider_id))

    # ── Write ────────────────────────────────────────────────────────────

    def store_multiple_days(
        self,
        provider_id: int,
        days: list[DateAvailability],
        version: int,
    ) -> bool:
        """
        Batch store via a WATCHed pipeline.

        Args:
            provider_id: Provider ID
            days: Materialized days
            version: Provider version read before the days were computed

        Returns:
            False if the version moved and nothing was written.
        """
        if not days:
            return True

        version_key = self._version_key(provider_id)
        pipe = self.redis.pipeline()
        try:
            pipe.watch(version_key)
            if _version(pipe.get(version_key)) != version:
                return False
            pipe.multi()
            for day in days:
                pipe.set(self._key(provider_id, day.date), dump_day(day), ex=self.ttl_seconds)
            pipe.execute()
        except WatchError:
            return False
        finally:
            pipe.reset()
        return True

    # ── Read ─────────────────────────────────────────────────────────────

    def mget_days(
        self,
        provider_id: int,
        dates: list[date],
    ) -> dict[date, DateAvailability | None]:
        """
        Batch read for multiple dates.

        Returns:
            Dict mapping date → DateAvailability (or None on cache miss).
        """
        if not dates:
            return {}

        values = self.redis.mget([self._key(provider_id, dt) for dt in dates])
        return {
            dt: load_day(dt, _decode(raw)) if raw is not None else None
            for dt, raw in zip(dates, values)
        }

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_days(
        self,
        provider_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached days.

        Args:
            provider_id: Provider ID
            dates: Specific dates, or None to delete all for provider.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = [self._key(provider_id, dt) for dt in dates]
        else:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:{provider_id}:*"))

        if not keys:
            return 0

        return self.redis.delete(*keys)
