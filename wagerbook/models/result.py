"""Published results stored in one wide table.

Columns:
- id (PK)
- date, time (unique together: one result per slot)
- xa..xj: outcome digit per category, NULL while unpublished
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable

from sqlalchemy import Date, DateTime, Integer, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wagerbook.models.base import Base, utcnow
from wagerbook.models.enums import Category


class Result(Base):
    """One row per slot with up to ten category outcomes. Never updated."""

    __tablename__ = "results"
    __table_args__ = (UniqueConstraint("date", "time", name="uq_results_slot"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(20), nullable=False)

    xa: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xb: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xc: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xd: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xe: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xf: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xg: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xh: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xi: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    xj: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def outcome_for(self, category: Category) -> int | None:
        """Outcome digit for ``category``, or None when it was not published."""

        return OUTCOME_ACCESSORS[category](self)

    @property
    def outcomes(self) -> dict[str, int | None]:
        return {c.value: self.outcome_for(c) for c in Category}


OUTCOME_ACCESSORS: dict[Category, Callable[[Result], int | None]] = {
    Category.XA: lambda r: r.xa,
    Category.XB: lambda r: r.xb,
    Category.XC: lambda r: r.xc,
    Category.XD: lambda r: r.xd,
    Category.XE: lambda r: r.xe,
    Category.XF: lambda r: r.xf,
    Category.XG: lambda r: r.xg,
    Category.XH: lambda r: r.xh,
    Category.XI: lambda r: r.xi,
    Category.XJ: lambda r: r.xj,
}

# Column name per category, used when building rows from payloads.
OUTCOME_COLUMNS: dict[Category, str] = {c: c.value.lower() for c in Category}

if set(OUTCOME_ACCESSORS) != set(Category):  # pragma: no cover
    raise RuntimeError("Every category needs an outcome accessor")
