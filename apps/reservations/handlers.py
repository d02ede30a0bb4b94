"""Message bus wiring for the reservation core."""

from __future__ import annotations

import logging

from shared.application.message_bus import message_bus

from . import availability
from .application.command_handlers import (
    CancelReservationCommand,
    CancelReservationHandler,
    ConfirmReservationCommand,
    ConfirmReservationHandler,
    CreateManualBookingCommand,
    CreateManualBookingHandler,
    CreateSelfServiceBookingCommand,
    CreateSelfServiceBookingHandler,
)
from .domain.events import ReservationCancelled, ReservationConfirmed, ReservationCreated

logger = logging.getLogger(__name__)

_COMMAND_HANDLERS = {
    CreateSelfServiceBookingCommand: CreateSelfServiceBookingHandler(),
    CreateManualBookingCommand: CreateManualBookingHandler(),
    ConfirmReservationCommand: ConfirmReservationHandler(),
    CancelReservationCommand: CancelReservationHandler(),
}


def invalidate_availability(event) -> None:
    """Drop cached day availability for every venue-local date the interval touches."""
    from apps.venues.models import Field

    tz_name = (
        Field.objects.filter(pk=event.field_id)
        .values_list("venue__timezone", flat=True)
        .first()
    )
    if tz_name is None:
        return
    availability.invalidate(event.field_id, event.interval, tz_name)


def register() -> None:
    for command_type, handler in _COMMAND_HANDLERS.items():
        message_bus.register_command_handler(command_type, handler.handle)

    for event_type in (ReservationCreated, ReservationConfirmed, ReservationCancelled):
        message_bus.register_event_handler(event_type, invalidate_availability)
