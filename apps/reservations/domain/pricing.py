"""
Pricing

total = slot_count x price_per_hour + service_fee

The service fee is a fixed amount charged on self-service bookings only;
manual bookings entered by the owner pass a zero fee. No discounts,
proration or currency conversion.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.value_objects import Money


@dataclass(frozen=True)
class PriceQuote(ValueObject):
    slot_count: int
    price_per_hour: Money
    subtotal: Money
    service_fee: Money
    total: Money


def quote(slot_count: int, price_per_hour: Money, service_fee: Money | None = None) -> PriceQuote:
    if slot_count < 1:
        raise ValueError("A booking covers at least one slot")
    if price_per_hour.amount <= 0:
        raise ValueError("Hourly price must be positive")

    fee = service_fee if service_fee is not None else Money.zero(price_per_hour.currency)
    subtotal = price_per_hour * slot_count
    return PriceQuote(
        slot_count=slot_count,
        price_per_hour=price_per_hour,
        subtotal=subtotal,
        service_fee=fee,
        total=subtotal + fee,
    )


def configured_service_fee(currency: str) -> Money:
    from django.conf import settings

    return Money(Decimal(str(settings.RESERVATIONS["SERVICE_FEE"])), currency)
