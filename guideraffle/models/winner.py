"""Database model for stored raffle winners."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base
from .id_type import ID_TYPE
from ..db.utils import decode_ticket_list, dt_iso, encode_ticket_list

if TYPE_CHECKING:
    from ..raffle.engine import DrawResult


class Winner(Base):
    """One guide who won one prize category."""

    __tablename__ = "winners"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    guide_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    """Identity of the winning guide as supplied by the participant source."""

    guide_name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Display name at the time of the win."""

    metrics: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    """Snapshot of the performance metrics the tickets were derived from."""

    total_tickets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Number of tickets the guide held when they won."""

    drawn_ticket: Mapped[int] = mapped_column(Integer, nullable=False)
    """The ticket number that was drawn."""

    ticket_numbers: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """JSON-encoded list of every ticket the guide held at win time."""

    prize_category: Mapped[str] = mapped_column(String(100), nullable=False)
    """Identifier of the prize category the draw was run for."""

    prize_category_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    """Human readable category label shown on the results screen."""

    draw_position: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """1-based order in which the guide was drawn within the session."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    """Timestamp when the win was recorded."""

    __table_args__ = (
        UniqueConstraint("prize_category", "guide_id", name="uq_winners_category_guide"),
        Index("idx_winners_drawn_ticket", "drawn_ticket"),
        Index("idx_winners_prize_category", "prize_category"),
    )

    def __init__(
        self,
        *,
        guide_id: str,
        guide_name: str,
        drawn_ticket: int,
        prize_category: str,
        prize_category_name: Optional[str] = None,
        ticket_numbers: Optional[list[int]] = None,
        metrics: Optional[dict[str, Any]] = None,
        total_tickets: Optional[int] = None,
        draw_position: int = 1,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.guide_id = guide_id
        self.guide_name = guide_name
        self.drawn_ticket = drawn_ticket
        self.prize_category = prize_category
        self.prize_category_name = prize_category_name
        self.ticket_numbers = (
            encode_ticket_list(ticket_numbers) if ticket_numbers is not None else None
        )
        self.metrics = dict(metrics) if metrics else None
        self.total_tickets = (
            total_tickets
            if total_tickets is not None
            else len(ticket_numbers or [])
        )
        self.draw_position = draw_position
        if created_at is not None:
            self.created_at = created_at

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Winner(id={id}, guide_id={guide}, prize_category={cat}, drawn_ticket={ticket})>".format(
            id=self.id,
            guide=self.guide_id,
            cat=self.prize_category,
            ticket=self.drawn_ticket,
        )

    @classmethod
    def from_draw_result(
        cls,
        result: "DrawResult",
        *,
        prize_category: str,
        prize_category_name: Optional[str] = None,
        draw_position: int = 1,
        created_at: Optional[datetime] = None,
    ) -> "Winner":
        """Build a row from an engine :class:`~guideraffle.raffle.engine.DrawResult`."""

        guide = result.winner
        return cls(
            guide_id=guide.id,
            guide_name=guide.name,
            drawn_ticket=result.drawn_ticket,
            prize_category=prize_category,
            prize_category_name=prize_category_name,
            ticket_numbers=list(guide.ticket_numbers),
            metrics=dict(guide.participant.metrics),
            total_tickets=guide.total_tickets,
            draw_position=draw_position,
            created_at=created_at,
        )

    @property
    def ticket_number_list(self) -> list[int]:
        """Decoded ``ticket_numbers``."""
        return decode_ticket_list(self.ticket_numbers)

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "guide_id": self.guide_id,
            "guide_name": self.guide_name,
            "metrics": self.metrics or {},
            "total_tickets": self.total_tickets,
            "drawn_ticket": self.drawn_ticket,
            "ticket_numbers": self.ticket_number_list,
            "prize_category": self.prize_category,
            "prize_category_name": self.prize_category_name,
            "draw_position": self.draw_position,
            "created_at": dt_iso(self.created_at),
        }

    @classmethod
    def get_by_drawn_ticket(cls, session: Session, drawn_ticket: int) -> list["Winner"]:
        """Return every winner whose winning ticket was ``drawn_ticket``.

        Ticket numbers are reshuffled between allocations, so the same number
        may have won in more than one category.
        """

        stmt = (
            select(cls)
            .where(cls.drawn_ticket == drawn_ticket)
            .order_by(cls.created_at.asc(), cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    @classmethod
    def list_for_category(cls, session: Session, prize_category: str) -> list["Winner"]:
        """Return the winners of ``prize_category`` in draw order."""

        stmt = (
            select(cls)
            .where(cls.prize_category == prize_category)
            .order_by(cls.draw_position.asc(), cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    @classmethod
    def won_guide_ids(
        cls, session: Session, prize_category: Optional[str] = None
    ) -> set[str]:
        """Return ids of guides who already won, optionally within one category."""

        stmt = select(cls.guide_id)
        if prize_category is not None:
            stmt = stmt.where(cls.prize_category == prize_category)
        return set(session.scalars(stmt).all())


__all__ = ["Winner"]
