"""Repository layer for bets."""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from wagerbook.models.bet import Bet
from wagerbook.models.result import Result


class BetRepository:
    """Bet persistence, including the one-shot resolution claim."""

    def get_by_id(self, session: Session, bet_id: int) -> Bet | None:
        return session.get(Bet, bet_id)

    def get_for_update(self, session: Session, bet_id: int) -> Bet | None:
        stmt = (
            select(Bet)
            .where(Bet.id == bet_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return session.scalars(stmt).first()

    def create(
        self,
        session: Session,
        *,
        user_id: str,
        date: dt.date,
        time: str,
        category: str,
        bet_number: int,
        stake: int,
    ) -> Bet:
        bet = Bet(
            user_id=user_id,
            date=date,
            time=time,
            category=category,
            bet_number=bet_number,
            stake=stake,
        )
        session.add(bet)
        session.flush()
        return bet

    def claim_resolution(
        self,
        session: Session,
        bet_id: int,
        *,
        result_id: int,
        is_win: bool,
        win_amount: int,
    ) -> bool:
        """Move a pending bet to Resolved. Returns False if it was already resolved.

        The ``result_id IS NULL`` guard makes this a compare-and-set, so two
        resolvers can never both observe the bet as pending.
        """

        stmt = (
            update(Bet)
            .where(Bet.id == bet_id, Bet.result_id.is_(None))
            .values(result_id=result_id, is_win=is_win, win_amount=win_amount)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount == 1

    def list_for_user(self, session: Session, user_id: str) -> Sequence[Bet]:
        stmt = select(Bet).where(Bet.user_id == user_id).order_by(Bet.created_at.desc(), Bet.id.desc())
        return list(session.scalars(stmt).all())

    def list_pending_for_slot(self, session: Session, date: dt.date, time: str) -> Sequence[Bet]:
        stmt = (
            select(Bet)
            .where(Bet.date == date, Bet.time == time, Bet.result_id.is_(None))
            .order_by(Bet.id.asc())
        )
        return list(session.scalars(stmt).all())

    def list_pending_with_result(self, session: Session) -> Sequence[tuple[Bet, Result]]:
        """Pending bets whose slot already has a published result."""

        stmt = (
            select(Bet, Result)
            .join(Result, (Result.date == Bet.date) & (Result.time == Bet.time))
            .where(Bet.result_id.is_(None))
            .order_by(Bet.id.asc())
        )
        return [(bet, result) for bet, result in session.execute(stmt).all()]

    def count(self, session: Session) -> int:
        return int(session.scalar(select(func.count()).select_from(Bet)) or 0)
