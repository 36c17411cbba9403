"""Ledger store: the transactional primitive and the balance posting rule.

Every balance change goes through :func:`post_entry`, which writes the new
``token_balance`` and appends the matching ``Transaction`` in the caller's
transaction. Callers must hold the user's row lock (see
``UserRepository.get_for_update``) before posting.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker

from wagerbook.errors import ConcurrencyConflictError, InsufficientFundsError, InvalidInputError
from wagerbook.models.enums import TransactionType
from wagerbook.models.transaction import Transaction
from wagerbook.models.user import User

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected, lock_not_available
_RETRYABLE_PGCODES = frozenset({"40001", "40P01", "55P03"})


def is_concurrency_failure(exc: DBAPIError) -> bool:
    """True when the driver error means "lost a lock race, retry"."""

    pgcode = getattr(exc.orig, "pgcode", None)
    if pgcode in _RETRYABLE_PGCODES:
        return True
    return "database is locked" in str(exc.orig).lower()


class LedgerStore:
    """Atomic read-modify-write access to users, bets, results and transactions."""

    def __init__(self, engine: Engine, *, lock_timeout_ms: int = 5000) -> None:
        self._engine = engine
        self._lock_timeout_ms = int(lock_timeout_ms)
        self._session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        return self._engine

    def _apply_lock_timeout(self, session: Session) -> None:
        if self._engine.dialect.name == "postgresql" and self._lock_timeout_ms > 0:
            session.execute(text(f"SET LOCAL lock_timeout = '{self._lock_timeout_ms}ms'"))

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Yield a session whose writes commit together or not at all.

        Any exception raised inside the block rolls everything back and
        propagates. Lock timeouts and serialization failures surface as
        ``ConcurrencyConflictError``.
        """

        session = self._session_factory()
        try:
            with session.begin():
                self._apply_lock_timeout(session)
                yield session
        except DBAPIError as exc:
            if is_concurrency_failure(exc):
                logger.warning("Ledger transaction conflict: %s", exc.orig)
                raise ConcurrencyConflictError(details={"reason": str(exc.orig)}) from exc
            raise
        finally:
            session.close()

    def with_transaction(self, fn: Callable[[Session], T]) -> T:
        """Run ``fn`` inside :meth:`transaction` and return its result."""

        with self.transaction() as session:
            return fn(session)

    @contextmanager
    def read(self) -> Iterator[Session]:
        """Yield a session for plain reads."""

        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    def ping(self) -> bool:
        with self.read() as session:
            session.execute(text("SELECT 1"))
        return True


def post_entry(
    session: Session,
    user: User,
    tx_type: TransactionType,
    amount: int,
    description: str | None = None,
) -> Transaction:
    """Apply ``amount`` to ``user`` and append the ledger entry.

    ``amount`` is a positive magnitude; the sign comes from ``tx_type``.
    Raises ``InsufficientFundsError`` when the balance would go negative.
    """

    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidInputError(
            message="Invalid amount",
            details={"amount": ["Must be a positive integer"]},
        )

    balance = int(user.token_balance)
    new_balance = balance + tx_type.sign * amount
    if new_balance < 0:
        raise InsufficientFundsError(
            details={"user_id": user.id, "balance": balance, "requested": amount},
        )

    user.token_balance = new_balance
    entry = Transaction(
        user_id=user.id,
        type=tx_type.value,
        amount=amount,
        description=description,
        balance_after=new_balance,
    )
    session.add(entry)
    session.flush()

    logger.info(
        "Ledger %s user=%s amount=%s balance %s -> %s",
        tx_type.value,
        user.id,
        amount,
        balance,
        new_balance,
    )
    return entry
