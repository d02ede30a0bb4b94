"""Row locking helpers for Django querysets."""

from django.db import transaction
from django.db.utils import NotSupportedError


def lock_queryset_if_possible(queryset, **kwargs):
    """Apply select_for_update when inside transaction.atomic().

    Outside an atomic block select_for_update would raise on evaluation, and
    some backends (SQLite) ignore it; both cases fall back to the plain
    queryset. On SQLite the booking transaction relies on BEGIN IMMEDIATE
    instead (see ``config.settings``).
    """

    if not transaction.get_connection(queryset.db).in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update(**kwargs)
    except NotSupportedError:
        return queryset
