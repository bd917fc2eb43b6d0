"""Allocate tickets for a sample roster and draw two prize categories.

Winners are written to the database configured by ``DB_URL`` (the tables are
created if missing). Set ``RAFFLE_SEED`` to replay the same draw.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from guideraffle.db.engine import get_sessionmaker, make_engine
from guideraffle.models import Base
from guideraffle.raffle import (
    DrawEngine,
    DrawSession,
    Participant,
    format_ticket_number,
    make_random,
)
from guideraffle.workflows import (
    clear_category_winners,
    eligible_participants,
    persist_session_outcome,
    winners_for_category,
)

SAMPLE_ROSTER = [
    Participant("g-01", "Ana", 12, metrics={"tours": 24, "rating": 4.9}),
    Participant("g-02", "Bruno", 7, metrics={"tours": 14, "rating": 4.6}),
    Participant("g-03", "Carla", 3, metrics={"tours": 6, "rating": 4.8}),
    Participant("g-04", "Diego", 0, metrics={"tours": 0, "rating": 0.0}),
    Participant("g-05", "Elena", 9, metrics={"tours": 18, "rating": 4.7}),
]

CATEGORIES = [
    ("grand", "Grand Prize", 1),
    ("runner-up", "Runner-up Prizes", 3),
]


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("RAFFLE_LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s [%(name)s] %(message)s",
    )

    engine = make_engine()
    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    draw_engine = DrawEngine(make_random())
    ticketed = draw_engine.allocate(SAMPLE_ROSTER)
    for guide in ticketed:
        print(
            f"{guide.name:<8} {guide.total_tickets:>3} tickets "
            f"({guide.ticket_range.start}-{guide.ticket_range.end})"
        )

    with Session.begin() as session:
        for category_id, _, _ in CATEGORIES:
            clear_category_winners(session, category_id)

    for category_id, category_name, count in CATEGORIES:
        with Session.begin() as session:
            eligible = eligible_participants(session, ticketed)
            draw = DrawSession(
                eligible, count, engine=draw_engine, category=category_id
            )
            outcome = draw.run_to_completion()
            persist_session_outcome(
                session,
                outcome,
                prize_category=category_id,
                prize_category_name=category_name,
            )

            print(f"\n{category_name}:")
            for winner in winners_for_category(session, category_id):
                print(
                    f"  {winner.draw_position}. {winner.guide_name} "
                    f"{format_ticket_number(winner.drawn_ticket)}"
                )
            if outcome.short:
                print(f"  (only {len(outcome.results)} of {count} could be drawn)")


if __name__ == "__main__":
    main()
