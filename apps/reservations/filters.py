"""Filters for the owner reservations list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Reservation


class OwnerReservationFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Reservation.Status.choices)
    field = django_filters.UUIDFilter(field_name="field_id")
    start_after = django_filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="gte")
    start_before = django_filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="lt")

    class Meta:
        model = Reservation
        fields = ["status", "field", "source"]
