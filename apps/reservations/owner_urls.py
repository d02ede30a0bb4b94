"""URL routing for the venue owner dashboard."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import OwnerBookingView, OwnerFieldSlotsView, OwnerReservationViewSet

router = SimpleRouter()
router.register(r"reservations", OwnerReservationViewSet, basename="owner-reservation")

urlpatterns = [
    path("bookings/", OwnerBookingView.as_view(), name="owner-booking"),
    path("fields/<uuid:field_id>/slots/", OwnerFieldSlotsView.as_view(), name="owner-field-slots"),
    path("", include(router.urls)),
]
