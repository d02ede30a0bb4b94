"""Availability Reader.

Answers "what is booked on field F during [start, end)?" from committed
reservation state. The same overlap query serves the public slot grid and,
under a field lock, the booking transaction's conflict snapshot.

Day-level reads are cached per field and civil date under a versioned key.
The version is bumped after commit of any transaction that admits, confirms
or cancels a reservation touching that date, so a read that raced the commit
can only store its result under a version nobody asks for again. The cache is
advisory only and never consulted on the write path.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Dict, List
from zoneinfo import ZoneInfo

from django.conf import settings  # type: ignore
from django.core.cache import cache  # type: ignore

from shared.domain.value_objects import TimeRange
from shared.infrastructure.locking import lock_queryset_if_possible

from .domain.slots import CivilDate, OperatingWindow, day_grid
from .models import Reservation

logger = logging.getLogger(__name__)

CACHE_PREFIX = "availability"


def _cache_timeout() -> int:
    return int(settings.RESERVATIONS.get("AVAILABILITY_CACHE_TIMEOUT", 0))


def _version_key(field_id, civil_date: CivilDate) -> str:
    return f"{CACHE_PREFIX}:version:{field_id}:{civil_date.day.isoformat()}"


def _current_version(field_id, civil_date: CivilDate) -> int:
    key = _version_key(field_id, civil_date)
    version = cache.get(key)
    if version is None:
        # a fresh seed, so an evicted counter never resurrects old entries
        seed = time.time_ns()
        cache.add(key, seed, None)
        version = cache.get(key, seed)
    return version


def _cache_key(field_id, civil_date: CivilDate, version: int) -> str:
    return f"{CACHE_PREFIX}:{field_id}:{civil_date.day.isoformat()}:{version}"


def overlapping(field_id, interval: TimeRange, lock: bool = False):
    """Non-cancelled reservations on the field intersecting the interval, by start.

    With ``lock=True`` inside an atomic block the matching rows are locked too.
    """
    queryset = (
        Reservation.objects.blocking()
        .filter(field_id=field_id)
        .overlapping(interval.start, interval.end)
        .order_by("start_time")
    )
    if lock:
        queryset = lock_queryset_if_possible(queryset, of=("self",))
    return queryset


def booked_intervals(field_id, interval: TimeRange, lock: bool = False) -> List[TimeRange]:
    rows = overlapping(field_id, interval, lock=lock).values_list("start_time", "end_time")
    return [TimeRange(start, end) for start, end in rows]


def _read_day(field_id, civil_date: CivilDate) -> List[Dict]:
    return [
        {
            "start": interval.start.astimezone(civil_date.tz),
            "end": interval.end.astimezone(civil_date.tz),
        }
        for interval in booked_intervals(field_id, civil_date.whole_day())
    ]


def get_availability(field, day) -> List[Dict]:
    """Booked ``{start, end}`` pairs on the field's venue-local calendar day.

    ``field`` is a Field instance (its venue supplies the timezone) and
    ``day`` an ISO date string or ``date``. Only interval bounds are
    returned: no requester identity or price.
    """
    civil_date = CivilDate.parse(day, field.venue.timezone)
    timeout = _cache_timeout()
    if timeout <= 0:
        return _read_day(field.pk, civil_date)

    # version is read before the database so a concurrent bump wins
    key = _cache_key(field.pk, civil_date, _current_version(field.pk, civil_date))
    cached = cache.get(key)
    if cached is not None:
        return cached

    result = _read_day(field.pk, civil_date)
    cache.set(key, result, timeout)
    return result


def slot_grid(field, day, days: int = 7, window: OperatingWindow | None = None) -> List[Dict]:
    """Hourly booked/free grid for ``days`` consecutive civil dates from ``day``."""
    window = window or OperatingWindow.from_settings()
    first = CivilDate.parse(day, field.venue.timezone)
    last = first.shift(days - 1)
    booked = booked_intervals(field.pk, TimeRange(first.at_hour(0), last.at_hour(24)))

    grid = []
    for offset in range(days):
        civil_date = first.shift(offset)
        for slot in day_grid(civil_date, window, booked):
            grid.append(
                {
                    "date": civil_date.day,
                    "hour": slot.hour,
                    "start": slot.interval.start,
                    "end": slot.interval.end,
                    "is_available": slot.is_available,
                }
            )
    return grid


def civil_dates_covered(interval: TimeRange, tz_name: str) -> List[CivilDate]:
    """Venue-local dates an interval touches (end is exclusive)."""
    tz = ZoneInfo(tz_name)
    first = CivilDate(interval.start.astimezone(tz).date(), tz)
    last_instant = (interval.end - timedelta(microseconds=1)).astimezone(first.tz)
    dates = [first]
    while dates[-1].day < last_instant.date():
        dates.append(dates[-1].shift(1))
    return dates


def invalidate(field_id, interval: TimeRange, tz_name: str) -> None:
    """Retire every cached day the interval touches by bumping its version."""
    keys = [_version_key(field_id, civil_date) for civil_date in civil_dates_covered(interval, tz_name)]
    for key in keys:
        try:
            cache.incr(key)
        except ValueError:
            cache.add(key, time.time_ns(), None)
    logger.debug(f"Bumped availability cache versions {keys}")
