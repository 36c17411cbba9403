"""Account use-cases: admin balance adjustments, top-ups and identity sync."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from wagerbook.errors import InactiveUserError, InvalidInputError, UserNotFoundError
from wagerbook.ledger import LedgerStore, post_entry
from wagerbook.models.enums import TransactionType, UserRole
from wagerbook.models.user import User
from wagerbook.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class AccountService:
    """User accounts and the non-betting balance paths."""

    def __init__(self, users: UserRepository | None = None) -> None:
        self._users = users or UserRepository()

    def adjust_balance(self, store: LedgerStore, user_id: str, signed_amount: int, reason: str | None = None) -> User:
        """Credit (positive) or debit (negative) a user on behalf of an admin.

        A debit that would take the balance below zero raises
        ``InsufficientFundsError`` and changes nothing.
        """

        if not _is_int(signed_amount) or signed_amount == 0:
            raise InvalidInputError(
                message="Invalid amount",
                details={"amount": ["Must be a non-zero integer"]},
            )

        tx_type = TransactionType.ADMIN_ADD if signed_amount > 0 else TransactionType.ADMIN_DEDUCT
        description = reason or f"Admin {'add' if signed_amount > 0 else 'deduct'} tokens"

        with store.transaction() as session:
            user = self._users.get_for_update(session, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            post_entry(session, user, tx_type, abs(signed_amount), description=description)

        return user

    def add_money(self, store: LedgerStore, user_id: str, amount: int, description: str = "Token top-up") -> User:
        """User-initiated top-up."""

        if not _is_int(amount) or amount <= 0:
            raise InvalidInputError(
                message="Invalid amount",
                details={"amount": ["Must be a positive integer"]},
            )

        with store.transaction() as session:
            user = self._users.get_for_update(session, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            if not user.is_active:
                raise InactiveUserError(user_id)
            post_entry(session, user, TransactionType.ADD_MONEY, amount, description=description)

        return user

    def upsert_user(
        self,
        store: LedgerStore,
        user_id: str,
        *,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        role: str | None = None,
    ) -> User:
        """Create or refresh a user's profile. The balance is never touched here."""

        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidInputError(message="Invalid user id", details={"user_id": ["Must be a non-empty string"]})
        if role is not None and role not in {r.value for r in UserRole}:
            raise InvalidInputError(message="Invalid role", details={"role": ["Must be one of user|admin"]})

        profile = {"email": email, "first_name": first_name, "last_name": last_name}

        with store.transaction() as session:
            user = self._users.get_for_update(session, user_id)
            if user is None:
                user = self._users.create(session, user_id, role=role or UserRole.USER.value, **profile)
                logger.info("User %s created", user_id)
            else:
                for key, value in profile.items():
                    if value is not None:
                        setattr(user, key, value)
                if role is not None:
                    user.role = role
                session.flush()
        return user

    def set_user_active(self, store: LedgerStore, user_id: str, is_active: bool) -> User:
        with store.transaction() as session:
            user = self._users.get_for_update(session, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            user.is_active = bool(is_active)
            session.flush()

        logger.info("User %s %s", user_id, "activated" if is_active else "deactivated")
        return user

    def get_user(self, store: LedgerStore, user_id: str) -> User:
        with store.read() as session:
            user = self._users.get_by_id(session, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def get_balance(self, store: LedgerStore, user_id: str) -> int:
        return int(self.get_user(store, user_id).token_balance)

    def list_users(self, store: LedgerStore) -> Sequence[User]:
        with store.read() as session:
            return self._users.list_all(session)
