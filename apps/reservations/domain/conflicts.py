"""
Conflict Detector

Pure admission decision for a candidate interval against the live
(non-cancelled) reservations already on the same field.

The caller is responsible for handing in a snapshot that cannot change
before the insert: the booking transaction reads it under a lock on the
field row.
"""

from enum import Enum
from typing import Iterable, List

from shared.domain.value_objects import TimeRange


class Decision(Enum):
    ADMIT = 'admit'
    REJECT = 'reject'


def conflicts_with(candidate: TimeRange, existing: Iterable[TimeRange]) -> List[TimeRange]:
    """Every existing interval sharing at least one instant with the candidate"""
    return [interval for interval in existing if interval.overlaps_with(candidate)]


def detect(candidate: TimeRange, existing: Iterable[TimeRange]) -> Decision:
    """
    Decide whether the candidate can be admitted

    Partial overlap, containment in either direction and exact matches all
    reject; touching ends (one interval ending exactly where the other
    starts) admit. There is no partial admission.
    """
    for interval in existing:
        if interval.overlaps_with(candidate):
            return Decision.REJECT
    return Decision.ADMIT
