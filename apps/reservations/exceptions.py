"""Typed errors raised by the reservation core.

Every error carries a stable machine-readable ``code`` and the HTTP status
the API layer answers with. Callers are expected to branch on the class,
never on the message.
"""

from __future__ import annotations


class ReservationError(Exception):
    """Base class for all reservation core errors."""

    code = "reservation_error"
    status_code = 400
    default_message = "Reservation request failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BookingValidationError(ReservationError):
    """Caller input is malformed; rejected before any transaction opens."""

    code = "invalid_booking"


class InvalidSlotSelection(BookingValidationError):
    code = "invalid_slot_selection"
    default_message = "Select one or more consecutive hours within opening hours."


class MissingPaymentProof(BookingValidationError):
    code = "missing_payment_proof"
    default_message = "Attach a payment proof to book."


class MissingVisitorInfo(BookingValidationError):
    code = "missing_visitor_info"
    default_message = "Enter your name and phone number to book."


class SlotConflict(ReservationError):
    """The requested interval overlaps a live reservation on the field."""

    code = "slot_conflict"
    status_code = 409
    default_message = "The selected time is already booked."


class Unauthorized(ReservationError):
    code = "unauthorized"
    status_code = 403
    default_message = "You do not own this venue."


class FieldNotFound(ReservationError):
    code = "field_not_found"
    status_code = 404
    default_message = "Field not found."


class ReservationNotFound(ReservationError):
    code = "reservation_not_found"
    status_code = 404
    default_message = "Reservation not found."


class InvalidTransition(ReservationError):
    code = "invalid_transition"
    status_code = 409
    default_message = "The reservation cannot move to the requested status."


class BookingUnavailable(ReservationError):
    """The atomic unit kept failing on storage errors; safe to try again."""

    code = "try_again"
    status_code = 503
    default_message = "Booking is temporarily unavailable, please try again."
