"""URL routing for public and account-facing reservation endpoints."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AvailabilityView, ReservationViewSet

router = SimpleRouter()
router.register(r"", ReservationViewSet, basename="reservation")

urlpatterns = [
    path("availability/", AvailabilityView.as_view(), name="reservation-availability"),
    path("", include(router.urls)),
]
