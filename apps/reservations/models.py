"""Reservation model for Mal3bak.

Rows are only ever created by the booking transaction
(``apps.reservations.application.command_handlers``) and only ever change
status through the lifecycle handlers; do not save status changes directly.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import TimeRange

from .domain.lifecycle import CancellationSource as DomainCancellationSource
from .domain.lifecycle import ReservationStatus


class ReservationQuerySet(models.QuerySet):
    def blocking(self):
        """Reservations that hold their interval (everything but CANCELLED)."""
        return self.exclude(status=Reservation.Status.CANCELLED)

    def overlapping(self, start, end):
        """Half-open overlap with [start, end)."""
        return self.filter(start_time__lt=end, end_time__gt=start)


class Reservation(models.Model):
    """A booked interval on one field."""

    class Status(models.TextChoices):
        PENDING = ReservationStatus.PENDING.value, _("Pending confirmation")
        CONFIRMED = ReservationStatus.CONFIRMED.value, _("Confirmed")
        CANCELLED = ReservationStatus.CANCELLED.value, _("Cancelled")

    class Source(models.TextChoices):
        SELF_SERVICE = "self_service", _("Self-service")
        MANUAL = "manual", _("Entered by owner")

    class CancellationSource(models.TextChoices):
        OWNER = DomainCancellationSource.OWNER.value, _("Owner")
        SYSTEM = DomainCancellationSource.SYSTEM.value, _("System")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    field = models.ForeignKey(
        "venues.Field",
        on_delete=models.CASCADE,
        related_name="reservations",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="reservations",
    )
    visitor_name = models.CharField(max_length=150, blank=True)
    visitor_phone = models.CharField(max_length=20, blank=True)
    source = models.CharField(
        max_length=20,
        choices=Source.choices,
        default=Source.SELF_SERVICE,
    )
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    service_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="EGP")
    payment_proof = models.CharField(
        max_length=500,
        blank=True,
        help_text=_("Reference to the uploaded payment evidence (URL or storage key)."),
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_source = models.CharField(
        max_length=10,
        choices=CancellationSource.choices,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="reservation_valid_interval",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(account__isnull=False, visitor_name="", visitor_phone="")
                    | (models.Q(account__isnull=True) & ~models.Q(visitor_name=""))
                ),
                name="reservation_single_requester",
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__gte=0) & models.Q(service_fee__gte=0),
                name="reservation_non_negative_price",
            ),
        ]
        indexes = [
            models.Index(fields=["field", "start_time", "end_time"], name="reservation_field_interval_idx"),
            models.Index(fields=["status"], name="reservation_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.id} on {self.field_id} ({self.status})"

    @property
    def interval(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    @property
    def requester_name(self) -> str:
        if self.account_id:
            return self.account.get_full_name() or self.account.email
        return self.visitor_name

    @property
    def hours(self) -> int:
        return self.interval.hours
