"""Users app package.

Defines the platform account (``apps.users.models.CustomUser``, the
AUTH_USER_MODEL) with player, owner and administrator roles, and the
account deactivation service that cascades to reservations.
"""
