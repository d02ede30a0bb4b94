"""
Shared Kernel

This module contains base classes and utilities shared across the apps:
value objects, domain events, the unit of work and the message bus.
"""
