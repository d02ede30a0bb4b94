"""Venue services used by the reservation core.

Fields and venues are read-only from the booking side; the only writes here
are retirements, which cancel every live reservation underneath in the same
transaction so that freed slots are not held by phantom bookings.
"""

from __future__ import annotations

import logging
import uuid

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from shared.infrastructure.locking import lock_queryset_if_possible

from apps.reservations.exceptions import FieldNotFound

from .models import Field, Venue

logger = logging.getLogger(__name__)


def as_uuid(value) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def get_bookable_field(field_id, *, lock: bool = False) -> Field:
    """Return the active field on an active venue, or raise FieldNotFound.

    With ``lock=True`` (inside an atomic block) the field row is locked for
    the rest of the transaction; concurrent bookings on the same field queue
    behind it.
    """
    pk = as_uuid(field_id)
    if pk is None:
        raise FieldNotFound(f"Field {field_id} not found.")

    queryset = Field.objects.select_related("venue").filter(
        pk=pk, is_active=True, venue__is_active=True
    )
    if lock:
        queryset = lock_queryset_if_possible(queryset, of=("self",))
    field = queryset.first()
    if field is None:
        raise FieldNotFound(f"Field {field_id} not found.")
    return field


def retire_field(field_id) -> int:
    """Deactivate a field and cancel its live reservations. Returns the number cancelled."""
    from apps.reservations.services import cancel_reservations_where

    pk = as_uuid(field_id)
    with transaction.atomic():
        updated = Field.objects.filter(pk=pk, is_active=True).update(
            is_active=False, deleted_at=timezone.now()
        )
        if not updated:
            raise FieldNotFound(f"Field {field_id} not found.")
        cancelled = cancel_reservations_where(Q(field_id=pk))

    logger.info(f"Field {pk} retired, {cancelled} reservation(s) cancelled")
    return cancelled


def retire_venue(venue_id) -> int:
    """Deactivate a venue with all its fields and cancel their live reservations."""
    from apps.reservations.services import cancel_reservations_where

    pk = as_uuid(venue_id)
    now = timezone.now()
    with transaction.atomic():
        updated = Venue.objects.filter(pk=pk, is_active=True).update(
            is_active=False, deleted_at=now
        )
        if not updated:
            raise Venue.DoesNotExist(f"Venue {venue_id} not found.")
        Field.objects.filter(venue_id=pk, is_active=True).update(is_active=False, deleted_at=now)
        cancelled = cancel_reservations_where(Q(field__venue_id=pk))

    logger.info(f"Venue {pk} retired, {cancelled} reservation(s) cancelled")
    return cancelled
