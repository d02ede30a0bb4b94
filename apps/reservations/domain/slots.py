"""
Slot Model

A field's day is cut into whole-hour slots inside a fixed operating window
(by default 14:00 to midnight). A booking request names hours of the day; the
selection is validated and collapsed into a single half-open interval on the
venue's civil date.

Dates never go through the server clock: callers pass a CivilDate that
carries the venue timezone, so "2024-06-01 at 19:00" means 19:00 on the
venue's wall clock regardless of where the server runs.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from shared.domain.base import ValueObject
from shared.domain.value_objects import TimeRange

from apps.reservations.exceptions import InvalidSlotSelection


@dataclass(frozen=True)
class OperatingWindow(ValueObject):
    """
    Bookable hours of a day

    Hours opening_hour .. closing_hour - 1 are bookable; closing_hour may be
    24 (midnight of the following day).
    """
    opening_hour: int = 14
    closing_hour: int = 24

    def __post_init__(self):
        if not 0 <= self.opening_hour < self.closing_hour <= 24:
            raise ValueError(
                f"Invalid operating window {self.opening_hour}-{self.closing_hour}"
            )

    @classmethod
    def from_settings(cls) -> 'OperatingWindow':
        from django.conf import settings

        config = settings.RESERVATIONS
        return cls(config["OPENING_HOUR"], config["CLOSING_HOUR"])

    @property
    def hours(self) -> range:
        return range(self.opening_hour, self.closing_hour)

    def __contains__(self, hour: int) -> bool:
        return self.opening_hour <= hour < self.closing_hour


@dataclass(frozen=True)
class CivilDate(ValueObject):
    """A calendar date on a venue's wall clock."""
    day: date
    tz: ZoneInfo

    @classmethod
    def parse(cls, value: str | date, tz_name: str) -> 'CivilDate':
        """Build from an ISO ``YYYY-MM-DD`` string (or a date) and an IANA zone name."""
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {tz_name}") from exc

        if isinstance(value, datetime):
            raise TypeError("CivilDate expects a date, not a datetime")
        if isinstance(value, date):
            return cls(value, tz)
        try:
            return cls(date.fromisoformat(value), tz)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid date: {value!r}, expected YYYY-MM-DD") from exc

    def at_hour(self, hour: int) -> datetime:
        """Wall-clock instant ``hour:00`` on this date; hour 24 is next midnight."""
        naive = datetime.combine(self.day, time()) + timedelta(hours=hour)
        return naive.replace(tzinfo=self.tz)

    def whole_day(self) -> TimeRange:
        return TimeRange(self.at_hour(0), self.at_hour(24))

    def shift(self, days: int) -> 'CivilDate':
        return CivilDate(self.day + timedelta(days=days), self.tz)

    def __str__(self):
        return self.day.isoformat()


@dataclass(frozen=True)
class SlotState(ValueObject):
    """One hourly cell of a field's slot grid"""
    hour: int
    interval: TimeRange
    is_available: bool


def normalize_hours(hours: Iterable, window: OperatingWindow) -> List[int]:
    """
    Validate a requested hour selection and return it sorted

    Raises InvalidSlotSelection when the selection is empty, contains
    non-integers, duplicates or hours outside the window, or has gaps.
    Gaps are rejected so that the slot count always equals the interval
    length the price is computed from.
    """
    if hours is None or isinstance(hours, (str, bytes)):
        raise InvalidSlotSelection("Select at least one hour.")

    selected = list(hours)
    if not selected:
        raise InvalidSlotSelection("Select at least one hour.")

    for hour in selected:
        if isinstance(hour, bool) or not isinstance(hour, int):
            raise InvalidSlotSelection(f"Invalid hour: {hour!r}.")
        if hour not in window:
            raise InvalidSlotSelection(
                f"Hour {hour} is outside opening hours "
                f"({window.opening_hour}:00-{window.closing_hour}:00)."
            )

    ordered = sorted(selected)
    if len(set(ordered)) != len(ordered):
        raise InvalidSlotSelection("Each hour can be selected only once.")

    for previous, current in zip(ordered, ordered[1:]):
        if current - previous != 1:
            raise InvalidSlotSelection("Selected hours must be consecutive.")

    return ordered


def span(civil_date: CivilDate, ordered_hours: Sequence[int]) -> TimeRange:
    """Interval covered by hours already checked with ``normalize_hours``."""
    return TimeRange(civil_date.at_hour(ordered_hours[0]), civil_date.at_hour(ordered_hours[-1] + 1))


def build_interval(
    civil_date: CivilDate,
    hours: Sequence[int],
    window: OperatingWindow,
) -> TimeRange:
    """Collapse a valid hour selection into ``[min(hour), max(hour) + 1)``."""
    return span(civil_date, normalize_hours(hours, window))


def day_grid(
    civil_date: CivilDate,
    window: OperatingWindow,
    booked: Iterable[TimeRange],
) -> List[SlotState]:
    """Render every slot of the day with its booked/free state."""
    booked = list(booked)
    grid = []
    for hour in window.hours:
        interval = TimeRange(civil_date.at_hour(hour), civil_date.at_hour(hour + 1))
        taken = any(interval.overlaps_with(existing) for existing in booked)
        grid.append(SlotState(hour=hour, interval=interval, is_available=not taken))
    return grid
