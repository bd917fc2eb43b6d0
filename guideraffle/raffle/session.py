"""Step-by-step draw session for an animated, externally paced reveal."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .allocation import TicketedParticipant
from .engine import DrawEngine, DrawPool, DrawResult, validate_winner_count
from .errors import InvalidTransitionError

logger = logging.getLogger(__name__)


class DrawState(enum.Enum):
    IDLE = "idle"
    COUNTING = "counting"
    DRAWING = "drawing"
    REVEALED = "revealed"
    AWAITING_NEXT = "awaiting_next"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({DrawState.COMPLETE, DrawState.CANCELLED})


@dataclass(frozen=True)
class SessionOutcome:
    """Final report of a draw session.

    Attributes
    ----------
    results : tuple[DrawResult, ...]
        Winners drawn before the session ended, in order.
    requested : int
        Number of winners the session was asked for.
    cancelled : bool
        ``True`` when the operator abandoned the session. Results drawn
        before cancelling are still reported but should not be persisted.
    """

    results: tuple[DrawResult, ...]
    requested: int
    cancelled: bool

    @property
    def completed(self) -> bool:
        return not self.cancelled

    @property
    def short(self) -> bool:
        """Whether the pool ran out before ``requested`` winners were drawn."""
        return self.completed and len(self.results) < self.requested

    @property
    def confirmed_winners(self) -> list[TicketedParticipant]:
        return [result.winner for result in self.results]


class DrawSession:
    """Drive one prize-category draw one winner at a time.

    The session owns its :class:`DrawPool` exclusively. The presentation
    layer decides the pacing and calls the transitions in order::

        IDLE -> COUNTING -> DRAWING -> REVEALED -> AWAITING_NEXT -> COUNTING ...
                                              \\-> COMPLETE

    :meth:`cancel` moves any non-terminal state to ``CANCELLED``. Only the
    ``DRAWING`` transition touches the engine.
    """

    def __init__(
        self,
        pool: Union[DrawPool, Iterable[TicketedParticipant]],
        count: int,
        *,
        engine: Optional[DrawEngine] = None,
        category: Optional[str] = None,
    ) -> None:
        self._count = validate_winner_count(count)
        self._engine = engine or DrawEngine()
        self._pool = pool if isinstance(pool, DrawPool) else self._engine.start_pool(pool)
        self._results: list[DrawResult] = []
        self._state = DrawState.IDLE
        self.category = category

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<DrawSession(category={cat}, state={state}, drawn={drawn}/{count})>".format(
            cat=self.category,
            state=self._state.value,
            drawn=len(self._results),
            count=self._count,
        )

    @property
    def state(self) -> DrawState:
        return self._state

    @property
    def requested(self) -> int:
        return self._count

    @property
    def pool(self) -> DrawPool:
        return self._pool

    @property
    def results(self) -> list[DrawResult]:
        """Winners confirmed so far, in draw order."""
        return list(self._results)

    @property
    def candidate_count(self) -> int:
        """Tickets still in play, for the "N tickets in the drum" display."""
        return self._pool.candidate_count

    @property
    def is_finished(self) -> bool:
        return self._state in TERMINAL_STATES

    def _require(self, *states: DrawState) -> None:
        if self._state not in states:
            expected = ", ".join(s.value for s in states)
            raise InvalidTransitionError(
                f"Cannot do that while {self._state.value}; expected one of: {expected}"
            )

    def _has_more(self) -> bool:
        return len(self._results) < self._count and not self._pool.is_empty

    def start_countdown(self) -> DrawState:
        """Begin the countdown before the next winner.

        Goes straight to ``COMPLETE`` when there is nothing left to draw, so
        an empty eligible pool ends the session without an error.
        """

        self._require(DrawState.IDLE, DrawState.AWAITING_NEXT)
        self._state = DrawState.COUNTING if self._has_more() else DrawState.COMPLETE
        return self._state

    def preview_ticket(self) -> Optional[int]:
        """Random ticket from the current pool for the spinning display."""
        return self._engine.preview_ticket(self._pool)

    def draw(self) -> DrawResult:
        """Draw the next winner and evict all of their tickets."""

        self._require(DrawState.COUNTING)
        self._state = DrawState.DRAWING
        step = self._engine.step(self._pool)
        if step.result is None:
            # start_countdown never enters COUNTING on an empty pool
            raise InvalidTransitionError("Draw pool is empty")
        self._pool = step.pool
        self._results.append(step.result)
        self._state = DrawState.REVEALED
        return step.result

    def proceed(self) -> DrawState:
        """Acknowledge the revealed winner and move on."""

        self._require(DrawState.REVEALED)
        self._state = DrawState.AWAITING_NEXT if self._has_more() else DrawState.COMPLETE
        return self._state

    def cancel(self) -> DrawState:
        """Abandon the session, keeping winners already drawn for reporting."""

        if self.is_finished:
            raise InvalidTransitionError(f"Session already {self._state.value}")
        logger.info(
            "Draw session for %r cancelled after %d of %d winners",
            self.category,
            len(self._results),
            self._count,
        )
        self._state = DrawState.CANCELLED
        return self._state

    def run_to_completion(self) -> SessionOutcome:
        """Step through the remaining draws without pausing."""

        while not self.is_finished:
            if self._state in (DrawState.IDLE, DrawState.AWAITING_NEXT):
                self.start_countdown()
            elif self._state is DrawState.COUNTING:
                self.draw()
            else:
                self.proceed()
        return self.outcome()

    def outcome(self) -> SessionOutcome:
        """Return the final report; only available once the session has ended."""

        if not self.is_finished:
            raise InvalidTransitionError(
                f"Session is still {self._state.value}; cancel or finish it first"
            )
        return SessionOutcome(
            results=tuple(self._results),
            requested=self._count,
            cancelled=self._state is DrawState.CANCELLED,
        )


__all__ = [
    "DrawSession",
    "DrawState",
    "SessionOutcome",
]
