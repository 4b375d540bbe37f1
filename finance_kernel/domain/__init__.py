"""
Pure domain layer.

Holds the injectable clock.  NO dependencies on the ORM, the database or
any I/O.
"""

from finance_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
]
