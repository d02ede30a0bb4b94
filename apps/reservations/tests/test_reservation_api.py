"""Integration tests for the reservation API endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.reservations import services
from apps.reservations.models import Reservation

from .helpers import BOOKING_DAY, ReservationFixtures


class PublicBookingAPITests(ReservationFixtures, APITestCase):
    def setUp(self) -> None:
        self.owner = self.create_owner()
        self.player = self.create_player()
        self.field = self.create_field(self.owner)
        self.list_url = reverse("reservation-list")
        self.availability_url = reverse("reservation-availability")

    def _payload(self, hours, **extra) -> dict:
        payload = {
            "field": str(self.field.id),
            "date": BOOKING_DAY,
            "hours": hours,
            "payment_proof": "receipts/instapay-001.png",
        }
        payload.update(extra)
        return payload

    def test_visitor_can_book_without_account(self) -> None:
        payload = self._payload([18, 19], visitor_name="Omar", visitor_phone="+201011112222")

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Reservation.Status.PENDING)
        self.assertEqual(response.data["requester_name"], "Omar")
        self.assertEqual(response.data["total_price"], "410.00")

    def test_logged_in_player_books_as_account(self) -> None:
        self.client.force_authenticate(self.player)
        payload = self._payload([14], visitor_name="ignored", visitor_phone="+2000")

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        reservation = Reservation.objects.get()
        self.assertEqual(reservation.account, self.player)
        self.assertEqual(reservation.visitor_name, "")

    def test_reservation_payload_is_derived_from_the_row(self) -> None:
        self.client.force_authenticate(self.player)

        response = self.client.post(self.list_url, self._payload([20, 21, 22]), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        reservation = Reservation.objects.get()
        self.assertEqual(response.data["hours"], 3)
        self.assertEqual(response.data["hours"], reservation.interval.hours)
        self.assertEqual(response.data["requester_name"], reservation.requester_name)
        self.assertNotIn("is_blocking", response.data)

    def test_conflict_is_409(self) -> None:
        self.client.force_authenticate(self.player)
        self.client.post(self.list_url, self._payload([18, 19]), format="json")

        response = self.client.post(self.list_url, self._payload([19]), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"], "slot_conflict")

    def test_validation_errors_are_400_with_codes(self) -> None:
        cases = [
            (self._payload([14, 16], visitor_name="A", visitor_phone="1"), "invalid_slot_selection"),
            (self._payload([14], payment_proof="", visitor_name="A", visitor_phone="1"), "missing_payment_proof"),
            (self._payload([14]), "missing_visitor_info"),
        ]
        for payload, code in cases:
            with self.subTest(code=code):
                response = self.client.post(self.list_url, payload, format="json")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
                self.assertEqual(response.data["error"], code)
        self.assertFalse(Reservation.objects.exists())

    def test_unknown_field_is_404(self) -> None:
        payload = self._payload(
            [14], field="00000000-0000-0000-0000-000000000000", visitor_name="A", visitor_phone="1"
        )
        response = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)
        self.assertEqual(response.data["error"], "field_not_found")

    def test_availability_is_public(self) -> None:
        services.create_manual_booking(self.field.id, BOOKING_DAY, [20, 21], self.owner)

        response = self.client.get(self.availability_url, {"field": str(self.field.id), "date": BOOKING_DAY})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(len(response.data["booked"]), 1)
        self.assertNotIn("visitor_name", response.data["booked"][0])

    def test_availability_requires_field_and_date(self) -> None:
        response = self.client.get(self.availability_url, {"field": str(self.field.id)})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_my_reservations(self) -> None:
        services.create_self_service_booking(
            self.field.id, BOOKING_DAY, [14], payment_proof="p", account=self.player
        )
        services.create_self_service_booking(
            self.field.id, BOOKING_DAY, [15], payment_proof="p", visitor_name="B", visitor_phone="2"
        )
        self.client.force_authenticate(self.player)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_my_reservations_requires_login(self) -> None:
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class OwnerAPITests(ReservationFixtures, APITestCase):
    def setUp(self) -> None:
        self.owner = self.create_owner()
        self.player = self.create_player()
        self.field = self.create_field(self.owner)
        self.reservation = services.create_self_service_booking(
            self.field.id, BOOKING_DAY, [18, 19], payment_proof="p", account=self.player
        )
        self.client.force_authenticate(self.owner)

    def test_owner_confirms_then_cancels(self) -> None:
        confirm_url = reverse("reservation-confirm", args=[self.reservation.id])
        cancel_url = reverse("reservation-cancel", args=[self.reservation.id])

        response = self.client.post(confirm_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Reservation.Status.CONFIRMED)

        response = self.client.post(confirm_url)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"], "invalid_transition")

        response = self.client.post(cancel_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["cancellation_source"], Reservation.CancellationSource.OWNER)

    def test_players_cannot_confirm(self) -> None:
        self.client.force_authenticate(self.player)
        response = self.client.post(reverse("reservation-confirm", args=[self.reservation.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_other_owner_gets_unauthorized(self) -> None:
        self.client.force_authenticate(self.create_owner("other@example.com", "+201000000005"))
        response = self.client.post(reverse("reservation-cancel", args=[self.reservation.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"], "unauthorized")

    def test_unknown_reservation_is_404(self) -> None:
        response = self.client.post(reverse("reservation-confirm", args=["missing"]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"], "reservation_not_found")

    def test_manual_booking(self) -> None:
        payload = {"field": str(self.field.id), "date": BOOKING_DAY, "hours": [14, 15, 16]}

        response = self.client.post(reverse("owner-booking"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Reservation.Status.CONFIRMED)
        self.assertEqual(response.data["total_price"], "600.00")
        self.assertEqual(response.data["requester_name"], "Manual booking")

    def test_owner_reservation_list_filters(self) -> None:
        services.create_manual_booking(self.field.id, BOOKING_DAY, [14], self.owner, customer_name="Hany")
        url = reverse("owner-reservation-list")

        response = self.client.get(url)
        self.assertEqual(len(response.data), 2)

        response = self.client.get(url, {"status": Reservation.Status.PENDING})
        self.assertEqual([item["id"] for item in response.data], [str(self.reservation.id)])

        response = self.client.get(url, {"field": str(self.field.id), "source": "manual"})
        self.assertEqual(len(response.data), 1)

    def test_owner_sees_only_own_venues(self) -> None:
        self.client.force_authenticate(self.create_owner("other@example.com", "+201000000005"))
        response = self.client.get(reverse("owner-reservation-list"))
        self.assertEqual(response.data, [])

    def test_slot_grid(self) -> None:
        url = reverse("owner-field-slots", args=[self.field.id])

        response = self.client.get(url, {"date": BOOKING_DAY, "days": 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        taken = [slot["hour"] for slot in response.data["slots"] if not slot["is_available"]]
        self.assertEqual(taken, [18, 19])
