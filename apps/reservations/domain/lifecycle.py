"""
Reservation Lifecycle

Status Finite State Machine

State transitions:
- PENDING -> CONFIRMED (owner verified the payment proof)
- PENDING -> CANCELLED (owner declined, or parent venue/field/account removed)
- CONFIRMED -> CANCELLED (owner cancelled, or parent removed)

CANCELLED is terminal. Reservations are created directly in PENDING
(self-service) or CONFIRMED (owner-entered manual booking). A cancelled
reservation stops blocking its interval immediately.
"""

from enum import Enum

from apps.reservations.exceptions import InvalidTransition


class ReservationStatus(str, Enum):
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'


class CancellationSource(str, Enum):
    OWNER = 'owner'
    SYSTEM = 'system'


TRANSITIONS = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.CANCELLED}),
    ReservationStatus.CANCELLED: frozenset(),
}

BLOCKING_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


def initial_status(owner_confirmed: bool) -> ReservationStatus:
    """Owner-entered bookings skip PENDING; the owner's presence stands in for payment checks"""
    return ReservationStatus.CONFIRMED if owner_confirmed else ReservationStatus.PENDING


def can_transition(current, target) -> bool:
    return ReservationStatus(target) in TRANSITIONS[ReservationStatus(current)]


def ensure_transition(current, target) -> ReservationStatus:
    """Validate current -> target and return the target status"""
    current, target = ReservationStatus(current), ReservationStatus(target)
    if target not in TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot move a {current.value} reservation to {target.value}."
        )
    return target


def blocks_slots(status) -> bool:
    return ReservationStatus(status) in BLOCKING_STATUSES
