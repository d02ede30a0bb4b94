"""Entry points of the reservation core.

The API views, the admin and other apps call these functions rather than
the models. Writes are dispatched as commands on the message bus; reads go
straight to the availability reader and the ORM.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from django.db import transaction  # type: ignore
from django.db.models import Q, QuerySet  # type: ignore

from shared.application.message_bus import message_bus
from shared.application.uow import DjangoUnitOfWork
from shared.infrastructure.locking import lock_queryset_if_possible

from apps.venues.services import get_bookable_field

from . import availability
from .application.command_handlers import (
    CancelReservationCommand,
    ConfirmReservationCommand,
    CreateManualBookingCommand,
    CreateSelfServiceBookingCommand,
    cancel_in_place,
)
from .domain.lifecycle import CancellationSource
from .exceptions import InvalidSlotSelection, Unauthorized
from .models import Reservation

logger = logging.getLogger(__name__)


def _pk(value):
    return getattr(value, "pk", value)


def get_availability(field_id, day) -> List[Dict]:
    """Booked ``{start, end}`` pairs for the field on a venue-local date."""
    field = get_bookable_field(field_id)
    try:
        return availability.get_availability(field, day)
    except (TypeError, ValueError) as exc:
        raise InvalidSlotSelection(str(exc)) from exc


def get_slot_grid(field_id, day, days: int = 7, owner=None) -> List[Dict]:
    """Hourly booked/free grid for a run of days, for owner dashboards.

    When ``owner`` is given the field must belong to one of their venues.
    """
    field = get_bookable_field(field_id)
    if owner is not None and str(field.venue.owner_id) != str(_pk(owner)):
        raise Unauthorized()
    try:
        return availability.slot_grid(field, day, days=days)
    except (TypeError, ValueError) as exc:
        raise InvalidSlotSelection(str(exc)) from exc


def create_self_service_booking(
    field_id,
    day,
    hours,
    *,
    payment_proof: str,
    account=None,
    visitor_name: str = "",
    visitor_phone: str = "",
) -> Reservation:
    """Book as a logged-in account or as a visitor (name + phone); lands in PENDING."""
    return message_bus.handle_command(
        CreateSelfServiceBookingCommand(
            field_id=field_id,
            day=day,
            hours=hours,
            payment_proof=payment_proof,
            account_id=_pk(account),
            visitor_name=visitor_name,
            visitor_phone=visitor_phone,
        )
    )


def create_manual_booking(
    field_id,
    day,
    hours,
    owner,
    customer_name: str = "",
    customer_phone: str = "",
) -> Reservation:
    """Owner-entered booking; lands in CONFIRMED with no service fee."""
    return message_bus.handle_command(
        CreateManualBookingCommand(
            field_id=field_id,
            day=day,
            hours=hours,
            owner_id=_pk(owner),
            customer_name=customer_name,
            customer_phone=customer_phone,
        )
    )


def confirm_reservation(reservation_id, owner) -> Reservation:
    return message_bus.handle_command(
        ConfirmReservationCommand(reservation_id=reservation_id, owner_id=_pk(owner))
    )


def cancel_reservation(reservation_id, owner) -> Reservation:
    return message_bus.handle_command(
        CancelReservationCommand(reservation_id=reservation_id, owner_id=_pk(owner))
    )


def list_reservations_for_account(account) -> QuerySet:
    return (
        Reservation.objects.filter(account_id=_pk(account))
        .select_related("field", "field__venue")
        .order_by("-start_time")
    )


def list_reservations_for_owner(owner, *, status: str | None = None, field_id=None) -> QuerySet:
    queryset = (
        Reservation.objects.filter(field__venue__owner_id=_pk(owner))
        .select_related("field", "field__venue", "account")
        .order_by("-start_time")
    )
    if status:
        queryset = queryset.filter(status=status)
    if field_id:
        queryset = queryset.filter(field_id=field_id)
    return queryset


def cancel_reservations_where(condition: Q) -> int:
    """Cancel every live reservation matching ``condition`` as a system cancellation.

    Runs inside the caller's transaction when there is one, so retiring a
    venue, field or account and cancelling its bookings commit together.
    """
    with DjangoUnitOfWork() as uow:
        queryset = Reservation.objects.blocking().filter(condition).order_by("start_time")
        reservations = list(lock_queryset_if_possible(queryset, of=("self",)))
        for reservation in reservations:
            cancel_in_place(uow, reservation, CancellationSource.SYSTEM)

    if reservations:
        logger.info(f"Cancelled {len(reservations)} reservation(s) by cascade")
    return len(reservations)


@transaction.atomic
def cancel_reservations_for_account(account) -> int:
    """Cancel reservations made by the account and those on venues it owns."""
    account_id = _pk(account)
    return cancel_reservations_where(Q(account_id=account_id) | Q(field__venue__owner_id=account_id))
