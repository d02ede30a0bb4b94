"""Venue and field models for Mal3bak.

A venue (a sports club) belongs to an owner account and groups one or
more bookable fields. Each venue carries its civil timezone so that slot
hours are always read on the venue's wall clock. Venues and fields are
retired rather than deleted so that reservation history survives; a
retired field is invisible to the booking core.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore
from zoneinfo import available_timezones


def default_timezone() -> str:
    return settings.TIME_ZONE


class ActiveQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Venue(models.Model):
    """A club with one or more fields, run by an owner."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="venues",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    timezone = models.CharField(
        max_length=64,
        default=default_timezone,
        help_text=_("IANA timezone used to read slot hours, e.g. Africa/Cairo."),
    )
    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        verbose_name = _("Venue")
        verbose_name_plural = _("Venues")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        if self.timezone not in available_timezones():
            raise ValidationError({"timezone": _("Unknown timezone.")})


class Field(models.Model):
    """A single bookable pitch inside a venue."""

    class Kind(models.TextChoices):
        FIVE_A_SIDE = "five", _("Five-a-side")
        SEVEN_A_SIDE = "seven", _("Seven-a-side")
        ELEVEN_A_SIDE = "eleven", _("Eleven-a-side")
        PADEL = "padel", _("Padel")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    venue = models.ForeignKey(
        Venue,
        on_delete=models.CASCADE,
        related_name="fields",
    )
    name = models.CharField(max_length=100)
    kind = models.CharField(max_length=10, choices=Kind.choices, default=Kind.FIVE_A_SIDE)
    price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        verbose_name = _("Field")
        verbose_name_plural = _("Fields")
        ordering = ["venue", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_per_hour__gt=0),
                name="field_price_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.venue.name} / {self.name}"

    @property
    def is_bookable(self) -> bool:
        return self.is_active and self.venue.is_active
