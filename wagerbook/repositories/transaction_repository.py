"""Repository layer for ledger entries (read side; writes go through ledger.post_entry)."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from wagerbook.models.transaction import Transaction


class TransactionRepository:
    def list_for_user(self, session: Session, user_id: str) -> Sequence[Transaction]:
        """Newest first."""

        stmt = (
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        )
        return list(session.scalars(stmt).all())

    def list_for_user_chronological(self, session: Session, user_id: str) -> Sequence[Transaction]:
        """Creation order, for replaying the log."""

        stmt = select(Transaction).where(Transaction.user_id == user_id).order_by(Transaction.id.asc())
        return list(session.scalars(stmt).all())
