"""Bet ORM model.

A bet is Pending while ``result_id`` is NULL and Resolved once it is set.
Resolution happens exactly once; ``is_win`` and ``win_amount`` never change
afterwards.
"""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from wagerbook.models.base import Base, utcnow
from wagerbook.models.enums import Category


class Bet(Base):
    """A wager by one user on one category outcome of a slot."""

    __tablename__ = "bets"
    __table_args__ = (
        CheckConstraint("stake > 0", name="ck_bets_stake_positive"),
        CheckConstraint("bet_number >= 0 AND bet_number <= 9", name="ck_bets_bet_number_digit"),
        CheckConstraint(
            "category IN (" + ", ".join(f"'{c.value}'" for c in Category) + ")",
            name="ck_bets_category_known",
        ),
        Index("ix_bets_slot_pending", "date", "time", "result_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False, index=True)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(2), nullable=False)
    bet_number: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    stake: Mapped[int] = mapped_column(Integer, nullable=False)

    is_win: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    win_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    result_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("results.id"), nullable=True, index=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def is_pending(self) -> bool:
        return self.result_id is None

    @property
    def category_enum(self) -> Category:
        return Category(self.category)
