"""Ticket allocation: turn per-guide ticket counts into a shuffled numbering."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from .errors import InvalidInputError
from .rng import default_random

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Participant:
    """A guide entering the raffle.

    Attributes
    ----------
    id : str
        Stable identity of the guide. Must be unique within one allocation.
    name : str
        Display name.
    total_tickets : int
        Number of tickets earned, computed upstream from performance metrics.
    metrics : Mapping[str, Any]
        Opaque snapshot of the metrics behind ``total_tickets``. Stored
        alongside a win but never interpreted here.
    attributes : Mapping[str, Any]
        Any other display attributes (team, avatar, ...).
    """

    id: str
    name: str
    total_tickets: int
    metrics: Mapping[str, Any] = field(default_factory=dict, hash=False)
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class TicketRange:
    """Lowest and highest ticket held; display only, not contiguous."""

    start: int
    end: int

    @classmethod
    def empty(cls) -> "TicketRange":
        return cls(0, 0)


@dataclass(frozen=True)
class TicketedParticipant:
    """A :class:`Participant` together with the ticket numbers it holds."""

    participant: Participant
    ticket_numbers: tuple[int, ...]
    ticket_range: TicketRange

    @property
    def id(self) -> str:
        return self.participant.id

    @property
    def name(self) -> str:
        return self.participant.name

    @property
    def total_tickets(self) -> int:
        return len(self.ticket_numbers)

    def owns(self, ticket: int) -> bool:
        return ticket in self.ticket_numbers


def _validate_ticket_count(participant: Participant) -> int:
    count = participant.total_tickets
    # bool is an int subclass but never a meaningful ticket count
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidInputError(
            f"Participant {participant.id!r} has a non-integer ticket count: {count!r}"
        )
    if count < 0:
        raise InvalidInputError(
            f"Participant {participant.id!r} has a negative ticket count: {count}"
        )
    return count


def _fisher_yates(values: list[int], rng: random.Random) -> None:
    """Shuffle ``values`` in place with the Durstenfeld variant."""

    for i in range(len(values) - 1, 0, -1):
        j = rng.randint(0, i)
        values[i], values[j] = values[j], values[i]


def allocate_tickets(
    participants: Sequence[Participant],
    *,
    rng: Optional[random.Random] = None,
) -> list[TicketedParticipant]:
    """Assign every guide a random, disjoint set of ticket numbers.

    Parameters
    ----------
    participants : Sequence[Participant]
        Guides in display order. An empty sequence yields ``[]``.
    rng : Optional[random.Random], default: None
        Random source for the shuffle. The shared generator from
        :func:`~guideraffle.raffle.rng.default_random` is used when omitted.

    Returns
    -------
    list[TicketedParticipant]
        One entry per input participant in the same order. The union of all
        ``ticket_numbers`` is exactly ``1..N`` where ``N`` is the sum of the
        ticket counts, and no number appears twice.

    Notes
    -----
    The allocation is not incremental: each call reshuffles the full pool.

    1. Build ``[1, 2, ..., N]``.
    2. Fisher-Yates shuffle it, so every permutation is equally likely.
    3. Hand out consecutive slices of the shuffled list in input order.
    4. Sort each slice and record its min/max as the display range.

    Raises
    ------
    InvalidInputError
        If a ticket count is negative or not an integer, or if two
        participants share an id.
    """

    seen_ids: set[str] = set()
    counts: list[int] = []
    for participant in participants:
        if participant.id in seen_ids:
            raise InvalidInputError(f"Duplicate participant id {participant.id!r}")
        seen_ids.add(participant.id)
        counts.append(_validate_ticket_count(participant))

    total = sum(counts)
    pool = list(range(1, total + 1))
    _fisher_yates(pool, rng or default_random())

    ticketed: list[TicketedParticipant] = []
    cursor = 0
    for participant, count in zip(participants, counts):
        numbers = tuple(sorted(pool[cursor : cursor + count]))
        cursor += count
        ticket_range = (
            TicketRange(numbers[0], numbers[-1]) if numbers else TicketRange.empty()
        )
        ticketed.append(
            TicketedParticipant(
                participant=participant,
                ticket_numbers=numbers,
                ticket_range=ticket_range,
            )
        )

    logger.debug(
        "Allocated %d tickets across %d participants", total, len(ticketed)
    )
    return ticketed


def find_participant_by_ticket(
    ticket: int, ticketed: Iterable[TicketedParticipant]
) -> Optional[TicketedParticipant]:
    """Return the participant holding ``ticket``, or ``None`` if unassigned."""

    for candidate in ticketed:
        if candidate.owns(ticket):
            return candidate
    return None


def format_ticket_number(ticket: int, width: int = 4) -> str:
    """Render a ticket the way the reveal screen shows it, e.g. ``#0042``."""

    return f"#{ticket:0{width}d}"


__all__ = [
    "Participant",
    "TicketRange",
    "TicketedParticipant",
    "allocate_tickets",
    "find_participant_by_ticket",
    "format_ticket_number",
]
