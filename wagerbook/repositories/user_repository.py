"""Repository layer for User persistence."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wagerbook.models.user import User


class UserRepository:
    """Reads and row-locked loads for users."""

    def get_by_id(self, session: Session, user_id: str) -> User | None:
        return session.get(User, user_id)

    def get_for_update(self, session: Session, user_id: str) -> User | None:
        """Load the user row with ``SELECT ... FOR UPDATE``.

        The lock is held until the surrounding transaction ends, which
        serializes balance mutations for the same user.
        """

        stmt = (
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return session.scalars(stmt).first()

    def list_all(self, session: Session) -> Sequence[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.asc())
        return list(session.scalars(stmt).all())

    def create(self, session: Session, user_id: str, **profile: object) -> User:
        user = User(id=user_id, token_balance=0, **profile)
        session.add(user)
        session.flush()
        return user

    def count(self, session: Session, *, active_only: bool = False) -> int:
        stmt = select(func.count()).select_from(User)
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        return int(session.scalar(stmt) or 0)

    def total_tokens(self, session: Session) -> int:
        return int(session.scalar(select(func.coalesce(func.sum(User.token_balance), 0))) or 0)
