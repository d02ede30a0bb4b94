"""Venues app package.

Holds the read-only catalogue the reservation core books against:
venues (owner + civil timezone) and their fields (hourly price).
"""
