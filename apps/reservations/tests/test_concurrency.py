"""Race tests for the booking transaction.

These run outside the per-test transaction so that every thread gets its
own database connection and really competes for the field.
"""

from __future__ import annotations

import threading

from django.db import connection
from django.test import TransactionTestCase

from apps.reservations import services
from apps.reservations.exceptions import SlotConflict
from apps.reservations.models import Reservation

from .helpers import BOOKING_DAY, ReservationFixtures


class ConcurrentBookingTests(ReservationFixtures, TransactionTestCase):
    def setUp(self) -> None:
        self.owner = self.create_owner()
        self.field = self.create_field(self.owner)
        self.players = [
            self.create_player(f"player{i}@example.com", f"+20100000010{i}") for i in range(2)
        ]

    def _race(self, requests) -> list:
        barrier = threading.Barrier(len(requests))
        outcomes: list = []
        lock = threading.Lock()

        def attempt(player, hours) -> None:
            try:
                barrier.wait(timeout=10)
                result = services.create_self_service_booking(
                    self.field.id, BOOKING_DAY, hours, payment_proof="receipt.png", account=player
                )
            except Exception as exc:  # collected and asserted on below
                result = exc
            finally:
                connection.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt, args=request) for request in requests]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return outcomes

    def test_same_slots_exactly_one_wins(self) -> None:
        outcomes = self._race([(player, [18, 19]) for player in self.players])

        winners = [o for o in outcomes if isinstance(o, Reservation)]
        losers = [o for o in outcomes if isinstance(o, SlotConflict)]
        self.assertEqual(len(winners), 1, outcomes)
        self.assertEqual(len(losers), 1, outcomes)
        self.assertEqual(winners[0].status, Reservation.Status.PENDING)
        self.assertEqual(Reservation.objects.blocking().filter(field=self.field).count(), 1)

    def test_overlapping_selections_exactly_one_wins(self) -> None:
        outcomes = self._race([(self.players[0], [18, 19]), (self.players[1], [19, 20])])

        self.assertEqual(sum(isinstance(o, Reservation) for o in outcomes), 1, outcomes)
        self.assertEqual(sum(isinstance(o, SlotConflict) for o in outcomes), 1, outcomes)

    def test_disjoint_selections_both_win(self) -> None:
        outcomes = self._race([(self.players[0], [14, 15]), (self.players[1], [16, 17])])

        self.assertTrue(all(isinstance(o, Reservation) for o in outcomes), outcomes)
        self.assertEqual(Reservation.objects.filter(field=self.field).count(), 2)
