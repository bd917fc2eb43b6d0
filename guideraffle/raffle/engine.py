"""Draw engine: duplicate-free weighted selection with whole-block eviction."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .allocation import Participant, TicketedParticipant, allocate_tickets
from .errors import InvalidInputError
from .rng import default_random

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrawResult:
    """One winner of a draw session and the ticket that won.

    Attributes
    ----------
    winner : TicketedParticipant
        The winning guide with the tickets held at the time of the draw.
    drawn_ticket : int
        The selected ticket; always a member of ``winner.ticket_numbers``.
    """

    winner: TicketedParticipant
    drawn_ticket: int


@dataclass(frozen=True)
class DrawPool:
    """Tickets still in play during one draw session.

    The pool is a value: :meth:`evict` returns a new pool and leaves the
    original untouched, so no state is hidden between steps.
    """

    participants: tuple[TicketedParticipant, ...] = ()

    @classmethod
    def from_participants(
        cls, participants: Iterable[TicketedParticipant]
    ) -> "DrawPool":
        """Build a pool from eligible participants.

        Guides without tickets are dropped; they can never be drawn.

        Raises
        ------
        InvalidInputError
            If an entry is not a :class:`TicketedParticipant` or an id is repeated.
        """

        kept: list[TicketedParticipant] = []
        seen: set[str] = set()
        for entry in participants:
            if not isinstance(entry, TicketedParticipant):
                raise InvalidInputError(
                    f"Draw pools accept TicketedParticipant entries, got {type(entry).__name__}"
                )
            if entry.id in seen:
                raise InvalidInputError(f"Participant {entry.id!r} appears twice in the pool")
            seen.add(entry.id)
            if entry.ticket_numbers:
                kept.append(entry)
        return cls(tuple(kept))

    def candidates(self) -> list[tuple[int, TicketedParticipant]]:
        """Flatten the pool into equally weighted ``(ticket, owner)`` entries."""

        return [
            (ticket, participant)
            for participant in self.participants
            for ticket in participant.ticket_numbers
        ]

    @property
    def candidate_count(self) -> int:
        return sum(len(p.ticket_numbers) for p in self.participants)

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def is_empty(self) -> bool:
        return self.candidate_count == 0

    def evict(self, participant_id: str) -> "DrawPool":
        """Return a pool without any ticket held by ``participant_id``."""

        return DrawPool(
            tuple(p for p in self.participants if p.id != participant_id)
        )


@dataclass(frozen=True)
class DrawStep:
    """Outcome of one call to :func:`draw_step`.

    ``result`` is ``None`` only when the incoming pool was already empty.
    ``pool`` is the post-eviction pool to pass to the next step.
    """

    result: Optional[DrawResult]
    pool: DrawPool


PoolLike = Union[DrawPool, Sequence[TicketedParticipant]]


def _as_pool(pool: PoolLike) -> DrawPool:
    if isinstance(pool, DrawPool):
        return pool
    return DrawPool.from_participants(pool)


def validate_winner_count(count: int) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidInputError(f"Winner count must be an integer, got {count!r}")
    if count <= 0:
        raise InvalidInputError(f"Winner count must be at least 1, got {count}")
    return count


def draw_step(pool: PoolLike, *, rng: Optional[random.Random] = None) -> DrawStep:
    """Draw exactly one winner from ``pool``.

    Parameters
    ----------
    pool : DrawPool or Sequence[TicketedParticipant]
        Current pool state. When stepping through a session, pass back the
        ``pool`` returned by the previous step.
    rng : Optional[random.Random], default: None
        Random source. The shared default generator is used when omitted.

    Returns
    -------
    DrawStep
        The drawn result and the pool with every ticket of the winner evicted.

    Notes
    -----
    Each remaining ticket is one equally likely entry, so a guide's chance in
    this step is their remaining tickets over all remaining tickets.
    """

    current = _as_pool(pool)
    candidates = current.candidates()
    if not candidates:
        return DrawStep(result=None, pool=current)

    index = (rng or default_random()).randrange(len(candidates))
    ticket, winner = candidates[index]
    remaining = current.evict(winner.id)

    logger.debug(
        "Drew ticket %d for %r; %d tickets from %d participants remain",
        ticket,
        winner.id,
        remaining.candidate_count,
        remaining.participant_count,
    )
    return DrawStep(result=DrawResult(winner=winner, drawn_ticket=ticket), pool=remaining)


def draw_winners(
    pool: PoolLike,
    count: int,
    *,
    rng: Optional[random.Random] = None,
) -> list[DrawResult]:
    """Draw up to ``count`` distinct winners in order.

    Parameters
    ----------
    pool : DrawPool or Sequence[TicketedParticipant]
        Eligible participants, already filtered by the caller.
    count : int
        Number of winners requested. Must be at least 1.
    rng : Optional[random.Random], default: None
        Random source shared by every step of the session.

    Returns
    -------
    list[DrawResult]
        Winners in draw order. Shorter than ``count`` when the pool runs out,
        and empty when there is nobody eligible; neither case is an error.

    Raises
    ------
    InvalidInputError
        If ``count`` is not a positive integer.
    """

    validate_winner_count(count)
    current = _as_pool(pool)
    generator = rng or default_random()

    results: list[DrawResult] = []
    while len(results) < count and not current.is_empty:
        step = draw_step(current, rng=generator)
        if step.result is None:
            break
        results.append(step.result)
        current = step.pool

    if len(results) < count:
        logger.info(
            "Pool exhausted after %d of %d requested winners", len(results), count
        )
    return results


def preview_ticket(
    pool: PoolLike, *, rng: Optional[random.Random] = None
) -> Optional[int]:
    """Pick a random ticket still in ``pool`` for the suspense display.

    The result is cosmetic; the pool is not modified and the next real draw
    is independent of it. Returns ``None`` for an empty pool.
    """

    candidates = _as_pool(pool).candidates()
    if not candidates:
        return None
    return (rng or default_random()).choice(candidates)[0]


class DrawEngine:
    """Allocation and draws bound to one injected random source."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        """Create an engine.

        Parameters
        ----------
        rng : Optional[random.Random], default: None
            Random source used for every shuffle and draw made through this
            engine. Pass a seeded ``random.Random`` for reproducible runs.
        """

        self._rng = rng or default_random()

    @property
    def rng(self) -> random.Random:
        return self._rng

    def allocate(self, participants: Sequence[Participant]) -> list[TicketedParticipant]:
        """Shuffle a fresh ticket numbering for ``participants``."""
        return allocate_tickets(participants, rng=self._rng)

    def start_pool(self, eligible: Iterable[TicketedParticipant]) -> DrawPool:
        """Snapshot ``eligible`` into a pool for a new session."""
        return DrawPool.from_participants(eligible)

    def step(self, pool: PoolLike) -> DrawStep:
        return draw_step(pool, rng=self._rng)

    def draw_winners(self, pool: PoolLike, count: int) -> list[DrawResult]:
        return draw_winners(pool, count, rng=self._rng)

    def preview_ticket(self, pool: PoolLike) -> Optional[int]:
        return preview_ticket(pool, rng=self._rng)


__all__ = [
    "DrawEngine",
    "DrawPool",
    "DrawResult",
    "DrawStep",
    "draw_step",
    "draw_winners",
    "preview_ticket",
]
