"""Tests for the availability reader and its cache."""

from __future__ import annotations

from unittest import mock

from django.conf import settings
from django.core.cache import cache
from django.test import TestCase, override_settings

from apps.reservations import availability, services
from apps.reservations.domain.slots import CivilDate
from apps.reservations.exceptions import FieldNotFound, InvalidSlotSelection, SlotConflict, Unauthorized
from apps.reservations.handlers import register
from shared.application.message_bus import message_bus
from shared.domain.value_objects import TimeRange

from .helpers import BOOKING_DAY, ReservationFixtures


class AvailabilityReaderTests(ReservationFixtures, TestCase):
    def setUp(self) -> None:
        self.owner = self.create_owner()
        self.player = self.create_player()
        self.field = self.create_field(self.owner)

    def test_only_interval_bounds_are_exposed(self) -> None:
        services.create_self_service_booking(
            self.field.id, BOOKING_DAY, [18, 19], payment_proof="p", account=self.player
        )
        booked = services.get_availability(self.field.id, BOOKING_DAY)
        self.assertEqual(len(booked), 1)
        self.assertEqual(set(booked[0]), {"start", "end"})

    def test_other_days_are_not_reported(self) -> None:
        services.create_self_service_booking(
            self.field.id, "2030-06-02", [18], payment_proof="p", account=self.player
        )
        self.assertEqual(services.get_availability(self.field.id, BOOKING_DAY), [])

    def test_late_slot_belongs_to_its_civil_date(self) -> None:
        services.create_self_service_booking(
            self.field.id, BOOKING_DAY, [23], payment_proof="p", account=self.player
        )
        self.assertEqual(len(services.get_availability(self.field.id, BOOKING_DAY)), 1)
        self.assertEqual(services.get_availability(self.field.id, "2030-06-02"), [])

    def test_bad_input(self) -> None:
        with self.assertRaises(InvalidSlotSelection):
            services.get_availability(self.field.id, "tomorrow")
        with self.assertRaises(FieldNotFound):
            services.get_availability("00000000-0000-0000-0000-000000000000", BOOKING_DAY)

    def test_slot_grid_covers_a_week(self) -> None:
        grid = services.get_slot_grid(self.field.id, BOOKING_DAY)
        self.assertEqual(len(grid), 7 * 10)
        self.assertEqual(grid[0]["date"].isoformat(), BOOKING_DAY)
        self.assertEqual(grid[0]["hour"], 14)

    def test_slot_grid_is_for_the_field_owner(self) -> None:
        with self.assertRaises(Unauthorized):
            services.get_slot_grid(self.field.id, BOOKING_DAY, owner=self.player)

    def test_civil_dates_covered(self) -> None:
        day = CivilDate.parse(BOOKING_DAY, "Africa/Cairo")
        interval = TimeRange(day.at_hour(22), day.at_hour(24))
        dates = availability.civil_dates_covered(interval, "Africa/Cairo")
        self.assertEqual([str(d) for d in dates], [BOOKING_DAY])


@override_settings(RESERVATIONS={**settings.RESERVATIONS, "AVAILABILITY_CACHE_TIMEOUT": 60})
class AvailabilityCacheTests(ReservationFixtures, TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.owner = self.create_owner()
        self.player = self.create_player()
        self.field = self.create_field(self.owner)

    def book(self, hours):
        return services.create_self_service_booking(
            self.field.id, BOOKING_DAY, hours, payment_proof="p", account=self.player
        )

    def test_commit_drops_cached_day(self) -> None:
        self.assertEqual(services.get_availability(self.field.id, BOOKING_DAY), [])

        with self.captureOnCommitCallbacks(execute=True):
            reservation = self.book([18, 19])
        self.assertEqual(len(services.get_availability(self.field.id, BOOKING_DAY)), 1)

        with self.captureOnCommitCallbacks(execute=True):
            services.cancel_reservation(reservation.id, self.owner)
        self.assertEqual(services.get_availability(self.field.id, BOOKING_DAY), [])

    def test_read_racing_a_commit_does_not_pin_a_stale_day(self) -> None:
        reservation = self.book([18])

        def read_before_commit_lands(field_id, civil_date):
            # the reader saw the day empty, then the commit invalidated it
            availability.invalidate(reservation.field_id, reservation.interval, "Africa/Cairo")
            return []

        with mock.patch("apps.reservations.availability._read_day", side_effect=read_before_commit_lands):
            self.assertEqual(services.get_availability(self.field.id, BOOKING_DAY), [])

        self.assertEqual(len(services.get_availability(self.field.id, BOOKING_DAY)), 1)

    def test_invalidating_an_uncached_day(self) -> None:
        day = CivilDate.parse(BOOKING_DAY, "Africa/Cairo")
        availability.invalidate(self.field.id, day.whole_day(), "Africa/Cairo")
        self.assertEqual(services.get_availability(self.field.id, BOOKING_DAY), [])

        with self.captureOnCommitCallbacks(execute=True):
            self.book([20])
        self.assertEqual(len(services.get_availability(self.field.id, BOOKING_DAY)), 1)

    def test_write_path_never_trusts_the_cache(self) -> None:
        self.assertEqual(services.get_availability(self.field.id, BOOKING_DAY), [])

        # Commit callbacks are not run, so the cached day is now stale.
        self.book([18])
        self.assertEqual(services.get_availability(self.field.id, BOOKING_DAY), [])

        with self.assertRaises(SlotConflict):
            self.book([18])

    def test_handlers_register_once(self) -> None:
        register()
        register()
        handlers = message_bus._event_handlers
        for event_type, registered in handlers.items():
            with self.subTest(event=event_type.__name__):
                self.assertEqual(len(registered), len(set(registered)))
