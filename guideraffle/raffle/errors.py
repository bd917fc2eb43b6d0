"""Exceptions raised by the raffle subsystem."""

from __future__ import annotations


class RaffleError(Exception):
    """Base class for raffle errors."""


class InvalidInputError(RaffleError, ValueError):
    """Raised when a caller passes malformed input to the allocator or engine.

    Subclasses :class:`ValueError` so callers that already guard against
    ``ValueError`` keep working.
    """


class InvalidTransitionError(RaffleError, RuntimeError):
    """Raised when a draw session is driven through an illegal state change."""


__all__ = [
    "InvalidInputError",
    "InvalidTransitionError",
    "RaffleError",
]
