"""Reservations app package.

The scheduling core of the platform: hourly slots on a venue's civil
calendar, the availability reader, the conflict detector and the atomic
booking transaction that admits a reservation only if its interval is
free, plus the owner-driven lifecycle (PENDING, CONFIRMED, CANCELLED).
"""
