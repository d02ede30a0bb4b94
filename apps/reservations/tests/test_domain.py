"""Unit tests for the pure parts of the reservation core."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from apps.reservations.domain import conflicts, lifecycle, pricing
from apps.reservations.domain.slots import (
    CivilDate,
    OperatingWindow,
    build_interval,
    day_grid,
    normalize_hours,
    span,
)
from apps.reservations.exceptions import InvalidSlotSelection, InvalidTransition
from shared.domain.value_objects import Money, TimeRange

CAIRO = ZoneInfo("Africa/Cairo")


def cairo(hour: int, day: int = 1) -> datetime:
    return datetime(2030, 6, day, hour, tzinfo=CAIRO)


class SlotModelTests(SimpleTestCase):
    def setUp(self) -> None:
        self.window = OperatingWindow(14, 24)
        self.day = CivilDate.parse("2030-06-01", "Africa/Cairo")

    def test_contiguous_hours_collapse_to_single_interval(self) -> None:
        interval = build_interval(self.day, [16, 14, 15], self.window)
        self.assertEqual(interval, TimeRange(cairo(14), cairo(17)))
        self.assertEqual(interval.hours, 3)

    def test_last_slot_ends_at_next_midnight(self) -> None:
        interval = build_interval(self.day, [23], self.window)
        self.assertEqual(interval.end, datetime(2030, 6, 2, 0, tzinfo=CAIRO))

    def test_span_trusts_already_ordered_hours(self) -> None:
        ordered = normalize_hours([15, 14], self.window)
        self.assertEqual(span(self.day, ordered), TimeRange(cairo(14), cairo(16)))
        self.assertEqual(span(self.day, ordered), build_interval(self.day, [15, 14], self.window))

    def test_gap_is_rejected(self) -> None:
        with self.assertRaises(InvalidSlotSelection):
            normalize_hours([14, 16], self.window)

    def test_invalid_selections_are_rejected(self) -> None:
        for hours in ([], None, [13], [24], [14, 14], ["14"], [True], [14.0], "14"):
            with self.subTest(hours=hours):
                with self.assertRaises(InvalidSlotSelection):
                    normalize_hours(hours, self.window)

    def test_civil_date_uses_venue_timezone(self) -> None:
        tokyo_day = CivilDate.parse(date(2030, 6, 1), "Asia/Tokyo")
        self.assertEqual(tokyo_day.at_hour(14), datetime(2030, 6, 1, 14, tzinfo=ZoneInfo("Asia/Tokyo")))

    def test_civil_date_rejects_bad_input(self) -> None:
        with self.assertRaises(ValueError):
            CivilDate.parse("01/06/2030", "Africa/Cairo")
        with self.assertRaises(ValueError):
            CivilDate.parse("2030-06-01", "Mars/Olympus")
        with self.assertRaises(TypeError):
            CivilDate.parse(cairo(14), "Africa/Cairo")

    def test_window_must_be_inside_a_day(self) -> None:
        with self.assertRaises(ValueError):
            OperatingWindow(20, 14)
        with self.assertRaises(ValueError):
            OperatingWindow(14, 25)

    def test_day_grid_marks_booked_hours(self) -> None:
        grid = day_grid(self.day, self.window, [TimeRange(cairo(18), cairo(20))])
        self.assertEqual(len(grid), 10)
        taken = [slot.hour for slot in grid if not slot.is_available]
        self.assertEqual(taken, [18, 19])


class ConflictDetectorTests(SimpleTestCase):
    existing = [TimeRange(cairo(14), cairo(16))]

    def test_overlaps_reject(self) -> None:
        candidates = [
            TimeRange(cairo(15), cairo(16)),  # contained
            TimeRange(cairo(15), cairo(17)),  # partial
            TimeRange(cairo(14), cairo(16)),  # identical
            TimeRange(cairo(13), cairo(18)),  # containing
        ]
        for candidate in candidates:
            with self.subTest(candidate=candidate):
                self.assertIs(conflicts.detect(candidate, self.existing), conflicts.Decision.REJECT)

    def test_touching_intervals_admit(self) -> None:
        self.assertIs(
            conflicts.detect(TimeRange(cairo(16), cairo(17)), self.existing),
            conflicts.Decision.ADMIT,
        )
        self.assertIs(conflicts.detect(TimeRange(cairo(14), cairo(15)), []), conflicts.Decision.ADMIT)

    def test_conflicts_with_lists_every_overlap(self) -> None:
        existing = [TimeRange(cairo(14), cairo(15)), TimeRange(cairo(15), cairo(16)), TimeRange(cairo(20), cairo(21))]
        overlapping = conflicts.conflicts_with(TimeRange(cairo(14), cairo(16)), existing)
        self.assertEqual(overlapping, existing[:2])


class PricingTests(SimpleTestCase):
    def test_self_service_total_includes_fee(self) -> None:
        quote = pricing.quote(3, Money(Decimal("200")), Money(Decimal("10")))
        self.assertEqual(quote.subtotal, Money(Decimal("600")))
        self.assertEqual(quote.total, Money(Decimal("610")))

    def test_manual_total_has_no_fee(self) -> None:
        quote = pricing.quote(3, Money(Decimal("200")))
        self.assertEqual(quote.service_fee, Money.zero())
        self.assertEqual(quote.total.amount, Decimal("600.00"))

    def test_rejects_empty_booking(self) -> None:
        with self.assertRaises(ValueError):
            pricing.quote(0, Money(Decimal("200")))

    def test_money_rejects_mixed_currencies(self) -> None:
        with self.assertRaises(ValueError):
            Money(Decimal("1"), "EGP") + Money(Decimal("1"), "USD")


class LifecycleTests(SimpleTestCase):
    def test_initial_status(self) -> None:
        self.assertIs(lifecycle.initial_status(owner_confirmed=False), lifecycle.ReservationStatus.PENDING)
        self.assertIs(lifecycle.initial_status(owner_confirmed=True), lifecycle.ReservationStatus.CONFIRMED)

    def test_allowed_transitions(self) -> None:
        self.assertTrue(lifecycle.can_transition("PENDING", "CONFIRMED"))
        self.assertTrue(lifecycle.can_transition("PENDING", "CANCELLED"))
        self.assertTrue(lifecycle.can_transition("CONFIRMED", "CANCELLED"))

    def test_forbidden_transitions(self) -> None:
        for current, target in [
            ("CONFIRMED", "PENDING"),
            ("CONFIRMED", "CONFIRMED"),
            ("CANCELLED", "PENDING"),
            ("CANCELLED", "CONFIRMED"),
            ("CANCELLED", "CANCELLED"),
        ]:
            with self.subTest(current=current, target=target):
                with self.assertRaises(InvalidTransition):
                    lifecycle.ensure_transition(current, target)

    def test_only_cancelled_frees_slots(self) -> None:
        self.assertTrue(lifecycle.blocks_slots("PENDING"))
        self.assertTrue(lifecycle.blocks_slots("CONFIRMED"))
        self.assertFalse(lifecycle.blocks_slots("CANCELLED"))
