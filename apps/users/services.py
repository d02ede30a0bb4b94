"""Account services."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from .models import CustomUser

logger = logging.getLogger(__name__)


def deactivate_account(account_id) -> int:
    """Deactivate an account, retire its venues and cancel its live reservations.

    Everything happens in one transaction. Returns the number of
    reservations cancelled.
    """
    from apps.reservations.services import cancel_reservations_for_account
    from apps.venues.models import Field, Venue

    now = timezone.now()
    with transaction.atomic():
        updated = CustomUser.objects.filter(pk=account_id).update(
            is_active=False, deactivated_at=now
        )
        if not updated:
            raise CustomUser.DoesNotExist(f"Account {account_id} not found.")

        Venue.objects.filter(owner_id=account_id, is_active=True).update(is_active=False, deleted_at=now)
        Field.objects.filter(venue__owner_id=account_id, is_active=True).update(
            is_active=False, deleted_at=now
        )
        cancelled = cancel_reservations_for_account(account_id)

    logger.info(f"Account {account_id} deactivated, {cancelled} reservation(s) cancelled")
    return cancelled
