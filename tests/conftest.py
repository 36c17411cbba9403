"""Shared fixtures: a fresh file-backed SQLite ledger per test."""

from __future__ import annotations

import datetime as dt

import pytest

from wagerbook import create_app
from wagerbook.db import create_ledger_store
from wagerbook.models.result import Result
from wagerbook.repositories.result_repository import ResultRepository
from wagerbook.services.account_service import AccountService
from wagerbook.services.bet_service import BetService
from wagerbook.services.resolution_service import ResolutionService
from wagerbook.services.result_service import ResultService, normalize_outcomes
from wagerbook.services.stats_service import StatsService

SLOT_DATE = dt.date(2026, 10, 17)
SLOT_TIME = "10:00"


@pytest.fixture
def store(tmp_path):
    ledger = create_ledger_store(f"sqlite:///{tmp_path / 'ledger.db'}", sqlite_busy_timeout=30)
    yield ledger
    ledger.engine.dispose()


@pytest.fixture
def accounts() -> AccountService:
    return AccountService()


@pytest.fixture
def bets() -> BetService:
    return BetService()


@pytest.fixture
def resolver() -> ResolutionService:
    return ResolutionService()


@pytest.fixture
def results(resolver) -> ResultService:
    return ResultService(resolver=resolver)


@pytest.fixture
def stats() -> StatsService:
    return StatsService()


@pytest.fixture
def make_user(store, accounts):
    """Create a user funded through the ledger (so the log replays from zero)."""

    def _make(user_id: str = "alice", balance: int = 100, **profile):
        accounts.upsert_user(store, user_id, **profile)
        if balance:
            accounts.add_money(store, user_id, balance)
        return accounts.get_user(store, user_id)

    return _make


@pytest.fixture
def insert_result(store):
    """Insert a result row without triggering resolution."""

    def _insert(outcomes: dict, date: dt.date = SLOT_DATE, time: str = SLOT_TIME) -> Result:
        with store.transaction() as session:
            return ResultRepository().create(session, date, time, normalize_outcomes(outcomes))

    return _insert


@pytest.fixture
def app(tmp_path):
    flask_app = create_app(
        {
            "TESTING": True,
            "DATABASE_URL": f"sqlite:///{tmp_path / 'app.db'}",
            "LOG_LEVEL": "WARNING",
        }
    )
    yield flask_app
    flask_app.extensions["engine"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()
