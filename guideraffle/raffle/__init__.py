"""Ticket allocation and winner draws for guide raffles."""

from .allocation import (
    Participant,
    TicketRange,
    TicketedParticipant,
    allocate_tickets,
    find_participant_by_ticket,
    format_ticket_number,
)
from .engine import (
    DrawEngine,
    DrawPool,
    DrawResult,
    DrawStep,
    draw_step,
    draw_winners,
    preview_ticket,
)
from .errors import InvalidInputError, InvalidTransitionError, RaffleError
from .rng import make_random
from .session import DrawSession, DrawState, SessionOutcome

__all__ = [
    "DrawEngine",
    "DrawPool",
    "DrawResult",
    "DrawSession",
    "DrawState",
    "DrawStep",
    "InvalidInputError",
    "InvalidTransitionError",
    "Participant",
    "RaffleError",
    "SessionOutcome",
    "TicketRange",
    "TicketedParticipant",
    "allocate_tickets",
    "draw_step",
    "draw_winners",
    "find_participant_by_ticket",
    "format_ticket_number",
    "make_random",
    "preview_ticket",
]
