"""Shared fixtures for reservation tests."""

from __future__ import annotations

from decimal import Decimal

from apps.users.models import User
from apps.venues.models import Field, Venue

BOOKING_DAY = "2030-06-01"


class ReservationFixtures:
    """Mixin creating owners, players and fields with sensible defaults."""

    def create_owner(self, email: str = "owner@example.com", phone: str = "+201000000001") -> User:
        return User.objects.create_user(
            email=email,
            phone=phone,
            password="OwnerPass123",
            role=User.RoleChoices.OWNER,
        )

    def create_player(self, email: str = "player@example.com", phone: str = "+201000000002") -> User:
        return User.objects.create_user(
            email=email,
            phone=phone,
            password="PlayerPass123",
            role=User.RoleChoices.PLAYER,
        )

    def create_field(
        self,
        owner: User,
        *,
        price: str = "200.00",
        timezone: str = "Africa/Cairo",
        name: str = "Pitch 1",
    ) -> Field:
        venue = Venue.objects.create(
            owner=owner,
            name=f"{owner.email} club",
            location="Nasr City, Cairo",
            timezone=timezone,
        )
        return Field.objects.create(
            venue=venue,
            name=name,
            kind=Field.Kind.FIVE_A_SIDE,
            price_per_hour=Decimal(price),
        )
