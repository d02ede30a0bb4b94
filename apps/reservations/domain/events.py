"""
Reservation Domain Events

Published on the message bus after the transaction that produced them
commits. Handlers keep read models (the availability cache) in step.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, TimeRange


@dataclass
class ReservationCreated(DomainEvent):
    """
    Event: A reservation was admitted

    Triggers:
    - Drop cached availability for the field and date
    """
    reservation_id: UUID
    field_id: UUID
    interval: TimeRange
    status: str
    total_price: Money


@dataclass
class ReservationConfirmed(DomainEvent):
    """Event: Owner confirmed a pending reservation (PENDING -> CONFIRMED)"""
    reservation_id: UUID
    field_id: UUID
    interval: TimeRange


@dataclass
class ReservationCancelled(DomainEvent):
    """
    Event: Reservation was cancelled

    Triggers:
    - Drop cached availability, the interval is bookable again
    """
    reservation_id: UUID
    field_id: UUID
    interval: TimeRange
    source: str
    old_status: str
