"""Repository layer for published results."""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from wagerbook.models.result import Result


class ResultRepository:
    """Insert and read operations for results. Results are never updated."""

    def get_by_id(self, session: Session, result_id: int) -> Result | None:
        return session.get(Result, result_id)

    def get_by_slot(self, session: Session, date: dt.date, time: str) -> Result | None:
        stmt = select(Result).where(Result.date == date, Result.time == time)
        return session.scalars(stmt).first()

    def list_range(
        self,
        session: Session,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
    ) -> Sequence[Result]:
        stmt = select(Result)
        if start_date is not None:
            stmt = stmt.where(Result.date >= start_date)
        if end_date is not None:
            stmt = stmt.where(Result.date <= end_date)
        stmt = stmt.order_by(Result.date.desc(), Result.time.asc())
        return list(session.scalars(stmt).all())

    def create(self, session: Session, date: dt.date, time: str, outcomes: dict[str, int | None]) -> Result:
        result = Result(date=date, time=time, **outcomes)
        session.add(result)
        session.flush()  # assign PK, surface unique violations here
        return result
