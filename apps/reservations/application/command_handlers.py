"""
Reservation Command Handlers

These are the use cases of the reservation core.
They orchestrate domain operations within transactions.

Commands:
- CreateSelfServiceBookingCommand: Player/visitor books, owner confirms later
- CreateManualBookingCommand: Owner enters a booking, confirmed immediately
- ConfirmReservationCommand: Owner confirms a pending reservation
- CancelReservationCommand: Owner declines or cancels a reservation
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List
import logging

from django.conf import settings
from django.db import OperationalError
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import Money, TimeRange
from shared.infrastructure.locking import lock_queryset_if_possible

from apps.reservations import availability
from apps.reservations.domain import conflicts, lifecycle, pricing
from apps.reservations.domain.events import (
    ReservationCancelled,
    ReservationConfirmed,
    ReservationCreated,
)
from apps.reservations.domain.slots import CivilDate, OperatingWindow, normalize_hours, span
from apps.reservations.exceptions import (
    BookingUnavailable,
    InvalidSlotSelection,
    MissingPaymentProof,
    MissingVisitorInfo,
    ReservationNotFound,
    SlotConflict,
    Unauthorized,
)
from apps.reservations.models import Reservation
from apps.venues.services import as_uuid, get_bookable_field

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateSelfServiceBookingCommand:
    """
    Command to create a booking from the public booking page

    Either account_id is set, or both visitor_name and visitor_phone are.
    """
    field_id: str
    day: str | date
    hours: List[int]
    payment_proof: str
    account_id: int | None = None
    visitor_name: str = ''
    visitor_phone: str = ''


@dataclass
class CreateManualBookingCommand:
    """Command for an owner entering a walk-in or phone booking"""
    field_id: str
    day: str | date
    hours: List[int]
    owner_id: int
    customer_name: str = ''
    customer_phone: str = ''


@dataclass
class ConfirmReservationCommand:
    """Command to confirm a booking after the owner checked the payment proof"""
    reservation_id: str
    owner_id: int


@dataclass
class CancelReservationCommand:
    """Command to decline or cancel a booking"""
    reservation_id: str
    owner_id: int


# ===== Booking transaction =====

@dataclass(frozen=True)
class BookingRequest:
    """Validated requester and pricing inputs handed to the booking transaction"""
    source: str
    owner_confirmed: bool
    charge_service_fee: bool
    account_id: int | None = None
    visitor_name: str = ''
    visitor_phone: str = ''
    payment_proof: str = ''
    acting_owner_id: int | None = None


@dataclass
class BookingTransaction:
    """
    The only write path that creates reservations

    Strategy:
    1. Validate the slot selection and resolve the field (no transaction yet)
    2. Start database transaction (atomic)
    3. Lock the field row (SELECT FOR UPDATE; BEGIN IMMEDIATE on SQLite)
    4. Read live reservations overlapping the candidate interval
    5. Run the conflict detector; REJECT aborts with SlotConflict
    6. Price the booking and insert it in its initial status
    7. Commit, then publish ReservationCreated

    Storage errors (lock timeout, deadlock, serialization failure) roll the
    whole unit back; it is retried up to max_attempts times and then
    reported as BookingUnavailable. A retry re-reads committed state, so a
    lost race comes back as SlotConflict rather than a silent second pick.
    """
    max_attempts: int = field(
        default_factory=lambda: settings.RESERVATIONS["TRANSACTION_MAX_ATTEMPTS"]
    )
    lock_field: bool = True
    window: OperatingWindow = field(default_factory=OperatingWindow.from_settings)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def book(self, field_id, day, hours, request: BookingRequest) -> Reservation:
        ordered_hours = normalize_hours(hours, self.window)

        field_obj = get_bookable_field(field_id)
        if request.acting_owner_id is not None and not _owns(field_obj, request.acting_owner_id):
            raise Unauthorized()

        try:
            civil_date = CivilDate.parse(day, field_obj.venue.timezone)
        except (TypeError, ValueError) as exc:
            raise InvalidSlotSelection(str(exc)) from exc
        interval = span(civil_date, ordered_hours)

        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                with DjangoUnitOfWork() as uow:
                    return self._admit(uow, field_obj.pk, interval, len(ordered_hours), request)
            except OperationalError as exc:
                last_error = exc
                logger.warning(
                    f"Booking transaction on field {field_obj.pk} failed "
                    f"(attempt {attempt}/{self.max_attempts}): {exc}"
                )

        logger.error(f"Booking on field {field_obj.pk} gave up after {self.max_attempts} attempts")
        raise BookingUnavailable() from last_error

    def _admit(self, uow, field_id, interval: TimeRange, slot_count: int, request: BookingRequest):
        field_obj = get_bookable_field(field_id, lock=self.lock_field)

        existing = availability.booked_intervals(field_obj.pk, interval, lock=self.lock_field)
        decision = conflicts.detect(interval, existing)
        if decision is conflicts.Decision.REJECT:
            overlapping = conflicts.conflicts_with(interval, existing)
            logger.warning(
                f"Slot conflict on field {field_obj.pk} for {interval}: "
                f"{len(overlapping)} overlapping reservation(s)"
            )
            raise SlotConflict()

        currency = settings.RESERVATIONS["CURRENCY"]
        fee = pricing.configured_service_fee(currency) if request.charge_service_fee else None
        price = pricing.quote(slot_count, Money(field_obj.price_per_hour, currency), fee)
        status = lifecycle.initial_status(request.owner_confirmed)

        reservation = Reservation.objects.create(
            field=field_obj,
            start_time=interval.start,
            end_time=interval.end,
            account_id=request.account_id,
            visitor_name=request.visitor_name,
            visitor_phone=request.visitor_phone,
            source=request.source,
            status=status.value,
            total_price=price.total.amount,
            service_fee=price.service_fee.amount,
            currency=currency,
            payment_proof=request.payment_proof,
            confirmed_at=timezone.now() if request.owner_confirmed else None,
        )

        uow.add_event(ReservationCreated(
            aggregate_id=reservation.id,
            reservation_id=reservation.id,
            field_id=field_obj.pk,
            interval=interval,
            status=status.value,
            total_price=price.total,
        ))

        logger.info(
            f"Reservation {reservation.id} admitted on field {field_obj.pk} "
            f"for {interval} ({status.value}, total {price.total})"
        )
        return reservation


def _owns(field_obj, owner_id) -> bool:
    return str(field_obj.venue.owner_id) == str(owner_id)


# ===== Command Handlers =====

class CreateSelfServiceBookingHandler:
    """Handler for bookings made from the public booking page"""

    def __init__(self, booking_transaction: BookingTransaction | None = None):
        self.booking_transaction = booking_transaction

    def handle(self, command: CreateSelfServiceBookingCommand) -> Reservation:
        """
        Validate requester inputs, then run the booking transaction

        Raises:
            InvalidSlotSelection, MissingPaymentProof, MissingVisitorInfo,
            FieldNotFound, SlotConflict, BookingUnavailable
        """
        booking_transaction = self.booking_transaction or BookingTransaction()
        # slot errors take precedence over payment and visitor errors
        normalize_hours(command.hours, booking_transaction.window)

        payment_proof = (command.payment_proof or '').strip()
        if not payment_proof:
            raise MissingPaymentProof()

        visitor_name = visitor_phone = ''
        if command.account_id is None:
            visitor_name = (command.visitor_name or '').strip()
            visitor_phone = (command.visitor_phone or '').strip()
            if not visitor_name or not visitor_phone:
                raise MissingVisitorInfo()

        request = BookingRequest(
            source=Reservation.Source.SELF_SERVICE,
            owner_confirmed=False,
            charge_service_fee=True,
            account_id=command.account_id,
            visitor_name=visitor_name,
            visitor_phone=visitor_phone,
            payment_proof=payment_proof,
        )
        return booking_transaction.book(command.field_id, command.day, command.hours, request)


class CreateManualBookingHandler:
    """Handler for owner-entered bookings: no fee, no payment proof, CONFIRMED at once"""

    def __init__(self, booking_transaction: BookingTransaction | None = None):
        self.booking_transaction = booking_transaction

    def handle(self, command: CreateManualBookingCommand) -> Reservation:
        booking_transaction = self.booking_transaction or BookingTransaction()
        request = BookingRequest(
            source=Reservation.Source.MANUAL,
            owner_confirmed=True,
            charge_service_fee=False,
            visitor_name=(command.customer_name or '').strip()
            or settings.RESERVATIONS["MANUAL_BOOKING_NAME"],
            visitor_phone=(command.customer_phone or '').strip(),
            acting_owner_id=command.owner_id,
        )
        return booking_transaction.book(command.field_id, command.day, command.hours, request)


def _get_for_update(reservation_id) -> Reservation:
    pk = as_uuid(reservation_id)
    reservation = None
    if pk is not None:
        queryset = Reservation.objects.select_related("field__venue").filter(pk=pk)
        reservation = lock_queryset_if_possible(queryset, of=("self",)).first()
    if reservation is None:
        raise ReservationNotFound(f"Reservation {reservation_id} not found.")
    return reservation


class ConfirmReservationHandler:
    """Handler for PENDING -> CONFIRMED"""

    def handle(self, command: ConfirmReservationCommand) -> Reservation:
        logger.info(f"Confirming reservation {command.reservation_id}")

        with DjangoUnitOfWork() as uow:
            reservation = _get_for_update(command.reservation_id)
            if not _owns(reservation.field, command.owner_id):
                raise Unauthorized()

            target = lifecycle.ensure_transition(reservation.status, lifecycle.ReservationStatus.CONFIRMED)
            reservation.status = target.value
            reservation.confirmed_at = timezone.now()
            reservation.save(update_fields=["status", "confirmed_at", "updated_at"])

            uow.add_event(ReservationConfirmed(
                aggregate_id=reservation.id,
                reservation_id=reservation.id,
                field_id=reservation.field_id,
                interval=reservation.interval,
            ))

        logger.info(f"Reservation {reservation.id} confirmed")
        return reservation


class CancelReservationHandler:
    """Handler for owner cancellation from PENDING or CONFIRMED"""

    def handle(self, command: CancelReservationCommand) -> Reservation:
        logger.info(f"Cancelling reservation {command.reservation_id}")

        with DjangoUnitOfWork() as uow:
            reservation = _get_for_update(command.reservation_id)
            if not _owns(reservation.field, command.owner_id):
                raise Unauthorized()

            old_status = reservation.status
            cancel_in_place(uow, reservation, lifecycle.CancellationSource.OWNER)

        logger.info(f"Reservation {reservation.id} cancelled (was {old_status})")
        return reservation


def cancel_in_place(uow, reservation: Reservation, source: lifecycle.CancellationSource) -> None:
    """Apply the CANCELLED transition to a locked reservation and record the event"""
    old_status = reservation.status
    target = lifecycle.ensure_transition(old_status, lifecycle.ReservationStatus.CANCELLED)
    reservation.status = target.value
    reservation.cancelled_at = timezone.now()
    reservation.cancellation_source = source.value
    reservation.save(update_fields=["status", "cancelled_at", "cancellation_source", "updated_at"])

    uow.add_event(ReservationCancelled(
        aggregate_id=reservation.id,
        reservation_id=reservation.id,
        field_id=reservation.field_id,
        interval=reservation.interval,
        source=source.value,
        old_status=old_status,
    ))
