# backend/provider_calendar/services/slots/calculator.py
"""
Availability materializer: open intervals per date.

Precedence, evaluated once per date:
  1. BLOCKED override without times      → Closed
  2. AVAILABLE override(s) with times    → PartialOverride (replaces rules)
  3. AVAILABLE override without times    → FullDayOverride (00:00-24:00)
  4. Active weekly rules for the weekday → WeeklyRules
  5. Nothing                             → Closed
BLOCKED overrides with times are then cut out of whatever is open.

Contains:
✓ weekly rules
✓ date overrides

Does NOT contain:
✗ Bookings (Conflict Detector)
✗ Booking window (window.py)
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Union

from .entities import (
    AvailabilityOverride,
    AvailabilityRule,
    DateAvailability,
    Interval,
    OverrideType,
)
from .timeutils import MINUTES_PER_DAY, date_range, get_day_of_week


@dataclass(frozen=True)
class Closed:
    reason: str | None = None


@dataclass(frozen=True)
class FullDayOverride:
    reason: str | None = None


@dataclass(frozen=True)
class PartialOverride:
    intervals: tuple[Interval, ...]
    reason: str | None = None


@dataclass(frozen=True)
class WeeklyRules:
    intervals: tuple[Interval, ...]


DayResolution = Union[Closed, FullDayOverride, PartialOverride, WeeklyRules]


def resolve_day(
    target_date: date,
    rules: Iterable[AvailabilityRule],
    overrides: Iterable[AvailabilityOverride],
) -> DayResolution:
    """Pick the source of truth for target_date's opening hours."""
    day_overrides = [o for o in overrides if o.date == target_date]

    for ovr in day_overrides:
        if ovr.type == OverrideType.BLOCKED and ovr.is_all_day:
            return Closed(ovr.reason or "Unavailable")

    bounded = [
        o for o in day_overrides
        if o.type == OverrideType.AVAILABLE and not o.is_all_day
    ]
    if bounded:
        return PartialOverride(
            intervals=merge_intervals(o.interval for o in bounded),
            reason=bounded[0].reason,
        )

    for ovr in day_overrides:
        if ovr.type == OverrideType.AVAILABLE:
            return FullDayOverride(ovr.reason)

    weekday = get_day_of_week(target_date)
    intervals = sorted(
        r.interval for r in rules
        if r.is_active and r.day_of_week == weekday
    )
    if intervals:
        return WeeklyRules(tuple(intervals))

    return Closed("No availability on this day")


def merge_intervals(intervals: Iterable[Interval]) -> tuple[Interval, ...]:
    """Sorted union; overlapping or touching intervals are joined."""
    merged: list[Interval] = []
    for interval in sorted(intervals):
        if merged and interval.start <= merged[-1].end:
            last = merged.pop()
            interval = Interval(last.start, max(last.end, interval.end))
        merged.append(interval)
    return tuple(merged)


def resolution_intervals(resolution: DayResolution) -> tuple[Interval, ...]:
    if isinstance(resolution, Closed):
        return ()
    if isinstance(resolution, FullDayOverride):
        return (Interval(0, MINUTES_PER_DAY),)
    return resolution.intervals


def subtract_intervals(
    intervals: Iterable[Interval],
    blocked: Iterable[Interval],
) -> tuple[Interval, ...]:
    """Remove every blocked window from intervals."""
    blocked = sorted(blocked)
    result: list[Interval] = []

    for interval in intervals:
        pieces = [interval]
        for b in blocked:
            next_pieces = []
            for p in pieces:
                if b.end <= p.start or p.end <= b.start:
                    next_pieces.append(p)
                    continue
                if p.start < b.start:
                    next_pieces.append(Interval(p.start, b.start))
                if b.end < p.end:
                    next_pieces.append(Interval(b.end, p.end))
            pieces = next_pieces
        result.extend(pieces)

    return tuple(result)


def materialize_day(
    target_date: date,
    rules: Iterable[AvailabilityRule],
    overrides: Iterable[AvailabilityOverride],
) -> DateAvailability:
    """Open intervals for a single date."""
    overrides = list(overrides)
    resolution = resolve_day(target_date, rules, overrides)

    if isinstance(resolution, Closed):
        return DateAvailability(target_date, False, (), resolution.reason)

    blocked = [
        o.interval for o in overrides
        if o.date == target_date and o.type == OverrideType.BLOCKED and not o.is_all_day
    ]
    intervals = subtract_intervals(resolution_intervals(resolution), blocked)
    if not intervals:
        return DateAvailability(target_date, False, (), "Blocked by override")

    reason = getattr(resolution, "reason", None)
    return DateAvailability(target_date, True, intervals, reason)


def materialize_range(
    start: date,
    end: date,
    rules: Iterable[AvailabilityRule],
    overrides: Iterable[AvailabilityOverride],
) -> list[DateAvailability]:
    """
    Open intervals for every date in [start, end].

    Overrides dated outside the range are ignored.
    """
    rules = list(rules)
    overrides = [o for o in overrides if start <= o.date <= end]
    return [materialize_day(d, rules, overrides) for d in date_range(start, end)]
