from __future__ import annotations

import sqlite3

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError

from wagerbook.errors import InsufficientFundsError, InvalidInputError
from wagerbook.ledger import is_concurrency_failure, post_entry
from wagerbook.models.enums import TransactionType
from wagerbook.models.user import User
from wagerbook.repositories.user_repository import UserRepository


class _PgError(Exception):
    def __init__(self, pgcode: str) -> None:
        super().__init__(f"pg error {pgcode}")
        self.pgcode = pgcode


class TestTransaction:
    def test_commits_together(self, store, accounts):
        with store.transaction() as session:
            user = UserRepository().create(session, "alice")
            post_entry(session, user, TransactionType.ADD_MONEY, 30)

        assert accounts.get_balance(store, "alice") == 30

    def test_exception_rolls_everything_back(self, store, accounts):
        with pytest.raises(RuntimeError):
            with store.transaction() as session:
                user = UserRepository().create(session, "alice")
                post_entry(session, user, TransactionType.ADD_MONEY, 30)
                raise RuntimeError("boom")

        with store.read() as session:
            assert session.get(User, "alice") is None

    def test_with_transaction_returns_value(self, store):
        user_id = store.with_transaction(lambda session: UserRepository().create(session, "bob").id)

        assert user_id == "bob"

    def test_ping(self, store):
        assert store.ping() is True


class TestPostEntry:
    def test_signed_types(self, store, make_user):
        make_user("alice", 10)
        with store.transaction() as session:
            user = UserRepository().get_for_update(session, "alice")
            win = post_entry(session, user, TransactionType.WIN, 5)
            bet = post_entry(session, user, TransactionType.BET, 15)

        assert (win.amount, win.balance_after, win.signed_amount) == (5, 15, 5)
        assert (bet.amount, bet.balance_after, bet.signed_amount) == (15, 0, -15)

    def test_negative_balance_is_refused(self, store, accounts, make_user):
        make_user("alice", 10)

        with pytest.raises(InsufficientFundsError):
            with store.transaction() as session:
                user = UserRepository().get_for_update(session, "alice")
                post_entry(session, user, TransactionType.ADMIN_DEDUCT, 11)

        assert accounts.get_balance(store, "alice") == 10

    @pytest.mark.parametrize("amount", [0, -4, 2.5, False])
    def test_amount_must_be_positive_int(self, store, make_user, amount):
        make_user("alice", 10)

        with pytest.raises(InvalidInputError):
            with store.transaction() as session:
                user = UserRepository().get_for_update(session, "alice")
                post_entry(session, user, TransactionType.ADD_MONEY, amount)


class TestConcurrencyFailure:
    @pytest.mark.parametrize("pgcode", ["40001", "40P01", "55P03"])
    def test_postgres_lock_errors(self, pgcode):
        assert is_concurrency_failure(DBAPIError("UPDATE users", {}, _PgError(pgcode)))

    def test_sqlite_busy(self):
        exc = OperationalError("BEGIN IMMEDIATE", {}, sqlite3.OperationalError("database is locked"))

        assert is_concurrency_failure(exc)

    def test_other_errors(self):
        assert not is_concurrency_failure(DBAPIError("SELECT", {}, _PgError("23505")))
