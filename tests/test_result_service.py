from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy.exc import IntegrityError

from tests.conftest import SLOT_DATE, SLOT_TIME
from wagerbook.errors import ConcurrencyConflictError, DuplicateResultError, InvalidInputError, ResultNotFoundError
from wagerbook.models.bet import Bet
from wagerbook.models.enums import Category
from wagerbook.repositories.bet_repository import BetRepository
from wagerbook.services import resolution_service
from wagerbook.services.resolution_service import ResolutionService
from wagerbook.services.result_service import ResultService, normalize_outcomes


class FlakyResolver(ResolutionService):
    """Fails resolution for a chosen set of bets."""

    def __init__(self, failing: set[int]) -> None:
        super().__init__()
        self.failing = failing

    def try_resolve(self, store, bet_id, result_id, is_win, win_amount):
        if bet_id in self.failing:
            raise ConcurrencyConflictError()
        return super().try_resolve(store, bet_id, result_id, is_win, win_amount)


def _bet(store, bet_id):
    with store.read() as session:
        return session.get(Bet, bet_id)


class TestNormalizeOutcomes:
    def test_accepts_enum_and_string_keys(self):
        columns = normalize_outcomes({Category.XA: 1, "xb": 2, "XC": None})

        assert columns["xa"] == 1
        assert columns["xb"] == 2
        assert columns["xc"] is None
        assert columns["xj"] is None

    def test_unknown_category(self):
        with pytest.raises(InvalidInputError) as excinfo:
            normalize_outcomes({"XZ": 1})

        assert "XZ" in excinfo.value.details

    @pytest.mark.parametrize("value", [10, -1, "5", 2.0, True])
    def test_out_of_range_digit(self, value):
        with pytest.raises(InvalidInputError):
            normalize_outcomes({"XA": value})


class TestPublishResult:
    def test_publishing_settles_only_that_slot(self, store, bets, results, accounts, make_user):
        make_user("alice", 100)
        make_user("bob", 100)
        win = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)
        loss = bets.place_bet(store, "bob", SLOT_DATE, SLOT_TIME, "XA", 4, 10)
        later = bets.place_bet(store, "bob", SLOT_DATE, "18:00", "XA", 5, 10)

        published = results.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 5, "XB": 3})

        assert published.result.id is not None
        assert published.result.outcomes["XA"] == 5
        assert published.result.outcomes["XC"] is None
        assert sorted(published.report.resolved) == sorted([win.id, loss.id])
        assert published.report.ok

        assert accounts.get_balance(store, "alice") == 180
        assert accounts.get_balance(store, "bob") == 80
        assert _bet(store, later.id).is_pending

    def test_bet_on_unpublished_category_loses(self, store, bets, results, accounts, make_user):
        make_user("alice", 100)
        bet = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XH", 0, 10)

        results.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 0})

        settled = _bet(store, bet.id)
        assert settled.is_win is False
        assert settled.win_amount == 0
        assert accounts.get_balance(store, "alice") == 90

    def test_duplicate_slot_is_rejected(self, store, bets, results, accounts, stats, make_user):
        make_user("alice", 100)
        bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)
        first = results.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 5})
        entries_before = len(stats.get_transaction_history(store, "alice"))

        with pytest.raises(DuplicateResultError):
            results.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 1})

        stored = results.get_result(store, SLOT_DATE, SLOT_TIME)
        assert stored.id == first.result.id
        assert stored.xa == 5
        assert accounts.get_balance(store, "alice") == 180
        assert len(stats.get_transaction_history(store, "alice")) == entries_before

    def test_invalid_outcomes_write_nothing(self, store, results):
        with pytest.raises(InvalidInputError):
            results.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 12})

        assert results.get_result(store, SLOT_DATE, SLOT_TIME) is None

    def test_one_failure_does_not_abort_the_batch(self, store, bets, accounts, make_user):
        make_user("alice", 100)
        first = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)
        broken = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)
        third = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)

        service = ResultService(resolver=FlakyResolver({broken.id}))
        published = service.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 5})

        assert sorted(published.report.resolved) == sorted([first.id, third.id])
        assert list(published.report.failed) == [broken.id]
        assert _bet(store, broken.id).is_pending
        assert accounts.get_balance(store, "alice") == 70 + 2 * 90

        report = ResolutionService().reconcile_pending(store)

        assert report.resolved == [broken.id]
        assert accounts.get_balance(store, "alice") == 70 + 3 * 90

    def test_outcome_error_is_isolated(self, store, bets, results, accounts, make_user, monkeypatch):
        make_user("alice", 100)
        first = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)
        broken = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)
        third = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)

        real_outcome = resolution_service.determine_outcome

        def _outcome(bet, result, multiplier=resolution_service.PAYOUT_MULTIPLIER):
            if bet.id == broken.id:
                raise ValueError(f"{bet.category!r} is not a valid Category")
            return real_outcome(bet, result, multiplier)

        monkeypatch.setattr(resolution_service, "determine_outcome", _outcome)
        published = results.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 5})

        assert published.report.resolved == [first.id, third.id]
        assert list(published.report.failed) == [broken.id]
        assert _bet(store, broken.id).is_pending
        assert accounts.get_balance(store, "alice") == 70 + 2 * 90

    def test_unknown_category_cannot_be_stored(self, store, make_user):
        make_user("alice", 100)

        with pytest.raises(IntegrityError):
            with store.transaction() as session:
                BetRepository().create(
                    session,
                    user_id="alice",
                    date=SLOT_DATE,
                    time=SLOT_TIME,
                    category="ZZ",
                    bet_number=5,
                    stake=10,
                )


class TestReadResults:
    def test_get_result_by_id(self, store, results):
        published = results.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 5})

        assert results.get_result_by_id(store, published.result.id).xa == 5
        with pytest.raises(ResultNotFoundError):
            results.get_result_by_id(store, published.result.id + 100)

    def test_range_listing_newest_date_first(self, store, results):
        for day, time in [(15, "10:00"), (16, "18:00"), (16, "10:00"), (17, "10:00")]:
            results.publish_result(store, dt.date(2026, 10, day), time, {"XA": 1})

        listed = results.get_results(store, dt.date(2026, 10, 16), dt.date(2026, 10, 17))

        assert [(r.date.day, r.time) for r in listed] == [(17, "10:00"), (16, "10:00"), (16, "18:00")]
        assert len(results.get_results(store)) == 4

    def test_reversed_range_is_rejected(self, store, results):
        with pytest.raises(InvalidInputError):
            results.get_results(store, dt.date(2026, 10, 17), dt.date(2026, 10, 1))
