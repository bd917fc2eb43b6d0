import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import Winner
from .raffle.allocation import TicketedParticipant
from .raffle.engine import DrawEngine, DrawResult
from .raffle.session import SessionOutcome

logger = logging.getLogger(__name__)


def eligible_participants(
    session: Session,
    ticketed: Iterable[TicketedParticipant],
    *,
    exclude_prior_winners: bool = True,
) -> list[TicketedParticipant]:
    """Return the guides that may enter the next category draw.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session used to look up stored winners.
    ticketed : Iterable[TicketedParticipant]
        Current allocation for the whole roster.
    exclude_prior_winners : bool, default: True
        When ``True``, guides who already won any category are left out.
        Pass ``False`` for raffles that allow one guide to win several
        categories.

    Returns
    -------
    list[TicketedParticipant]
        Eligible guides in roster order. Guides without tickets are kept
        here; the draw pool drops them.
    """

    roster = list(ticketed)
    if not exclude_prior_winners:
        return roster
    already_won = Winner.won_guide_ids(session)
    return [guide for guide in roster if guide.id not in already_won]


def record_winners(
    session: Session,
    results: Sequence[DrawResult],
    *,
    prize_category: str,
    prize_category_name: Optional[str] = None,
) -> list[Winner]:
    """Persist the ordered results of a finished draw session.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session used for persistence.
    results : Sequence[DrawResult]
        Winners in draw order, as returned by the engine.
    prize_category : str
        Identifier of the category the draw was run for.
    prize_category_name : Optional[str], default: None
        Display label stored next to the identifier.

    Returns
    -------
    list[Winner]
        Newly persisted rows, in draw order.

    Raises
    ------
    ValueError
        If the category already has stored winners, or the results repeat a
        guide. Call :func:`clear_category_winners` first to redraw a category.
    """

    if not prize_category:
        raise ValueError("prize_category must not be empty")
    if Winner.list_for_category(session, prize_category):
        raise ValueError(
            f"Prize category {prize_category!r} already has winners; "
            "clear them before recording a new draw"
        )
    guide_ids = [result.winner.id for result in results]
    if len(set(guide_ids)) != len(guide_ids):
        raise ValueError("Draw results contain the same guide more than once")

    # One timestamp for the whole session keeps the rows grouped in reports.
    now = datetime.now(timezone.utc)
    winners = [
        Winner.from_draw_result(
            result,
            prize_category=prize_category,
            prize_category_name=prize_category_name,
            draw_position=position,
            created_at=now,
        )
        for position, result in enumerate(results, start=1)
    ]
    session.add_all(winners)
    session.flush()

    logger.info(
        "Recorded %d winner(s) for prize category %r", len(winners), prize_category
    )
    return winners


def persist_session_outcome(
    session: Session,
    outcome: SessionOutcome,
    *,
    prize_category: str,
    prize_category_name: Optional[str] = None,
) -> list[Winner]:
    """Store the winners of a finished session unless it was cancelled.

    A cancelled session still reports the winners drawn before it was
    abandoned, but nothing is written and an empty list is returned. A
    session that drew nobody writes nothing either.
    """

    if outcome.cancelled:
        logger.warning(
            "Not persisting cancelled draw for %r (%d winner(s) discarded)",
            prize_category,
            len(outcome.results),
        )
        return []
    if not outcome.results:
        logger.info("No eligible participants for prize category %r", prize_category)
        return []
    if outcome.short:
        logger.info(
            "Draw for %r produced %d of %d requested winners",
            prize_category,
            len(outcome.results),
            outcome.requested,
        )
    return record_winners(
        session,
        outcome.results,
        prize_category=prize_category,
        prize_category_name=prize_category_name,
    )


def run_category_draw(
    session: Session,
    ticketed: Iterable[TicketedParticipant],
    *,
    prize_category: str,
    count: int,
    prize_category_name: Optional[str] = None,
    exclude_prior_winners: bool = True,
    engine: Optional[DrawEngine] = None,
) -> list[Winner]:
    """Filter, draw and persist the winners of one prize category in one go.

    This is the non-animated path: the whole session runs without pauses.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    ticketed : Iterable[TicketedParticipant]
        Current allocation for the whole roster.
    prize_category : str
        Identifier of the category being drawn.
    count : int
        Number of winners to draw for the category.
    prize_category_name : Optional[str], default: None
        Display label stored with each winner.
    exclude_prior_winners : bool, default: True
        Forwarded to :func:`eligible_participants`.
    engine : Optional[DrawEngine], default: None
        Engine carrying the random source; a default one is created when
        omitted.

    Returns
    -------
    list[Winner]
        Persisted winners in draw order. May hold fewer than ``count`` rows
        when the eligible pool runs out, or none when nobody is eligible.
    """

    engine = engine or DrawEngine()
    eligible = eligible_participants(
        session, ticketed, exclude_prior_winners=exclude_prior_winners
    )
    pool = engine.start_pool(eligible)
    results = engine.draw_winners(pool, count)
    if not results:
        logger.info("No eligible participants for prize category %r", prize_category)
        return []
    return record_winners(
        session,
        results,
        prize_category=prize_category,
        prize_category_name=prize_category_name,
    )


def clear_category_winners(session: Session, prize_category: str) -> int:
    """Delete the stored winners of ``prize_category`` so it can be redrawn.

    Returns
    -------
    int
        Number of rows removed.
    """

    result = session.execute(
        delete(Winner).where(Winner.prize_category == prize_category)
    )
    session.flush()
    removed = result.rowcount or 0
    logger.info("Cleared %d winner(s) from prize category %r", removed, prize_category)
    return removed


def winners_for_category(session: Session, prize_category: str) -> list[Winner]:
    return Winner.list_for_category(session, prize_category)


def find_winner_by_ticket(session: Session, drawn_ticket: int) -> list[Winner]:
    """Look up stored winners by the ticket number that won."""
    return Winner.get_by_drawn_ticket(session, drawn_ticket)
