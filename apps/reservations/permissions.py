"""Permission classes for the reservation API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class IsVenueOwner(permissions.BasePermission):
    """
    Allow venue owners and platform administrators.

    Ownership of the particular venue is checked by the reservation core
    itself, which answers with ``Unauthorized`` on mismatch.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return hasattr(user, "is_owner") and (user.is_owner() or user.is_platform_admin())
