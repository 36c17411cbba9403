from __future__ import annotations

import datetime as dt

import pytest

from tests.conftest import SLOT_DATE, SLOT_TIME
from wagerbook.errors import (
    InactiveUserError,
    InsufficientFundsError,
    InvalidInputError,
    SlotClosedError,
    UserNotFoundError,
)
from wagerbook.models.enums import TransactionType


class TestPlaceBet:
    def test_debits_stake_and_records_entry(self, store, bets, accounts, stats, make_user):
        make_user("alice", 100)

        bet = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)

        assert bet.id is not None
        assert bet.is_pending
        assert bet.category == "XA"
        assert bet.bet_number == 5
        assert bet.stake == 10
        assert accounts.get_balance(store, "alice") == 90

        entries = stats.get_transaction_history(store, "alice")
        assert entries[0].type == TransactionType.BET.value
        assert entries[0].amount == 10
        assert entries[0].balance_after == 90
        assert entries[0].description == "Bet on XA - 5"

    def test_lowercase_category_is_normalized(self, store, bets, make_user):
        make_user("alice", 20)

        bet = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "xj", 0, 1)

        assert bet.category == "XJ"

    def test_stake_equal_to_balance_is_allowed(self, store, bets, accounts, make_user):
        make_user("alice", 25)

        bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XB", 3, 25)

        assert accounts.get_balance(store, "alice") == 0

    def test_insufficient_funds_leaves_no_trace(self, store, bets, accounts, stats, make_user):
        make_user("alice", 5)

        with pytest.raises(InsufficientFundsError):
            bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)

        assert accounts.get_balance(store, "alice") == 5
        assert stats.get_bet_history(store, "alice") == []
        assert len(stats.get_transaction_history(store, "alice")) == 1

    @pytest.mark.parametrize(
        ("category", "bet_number", "stake", "field"),
        [
            ("XA", 5, 0, "stake"),
            ("XA", 5, -3, "stake"),
            ("XA", 5, 2.5, "stake"),
            ("XA", 5, True, "stake"),
            ("XZ", 5, 10, "category"),
            ("", 5, 10, "category"),
            ("XA", 10, 10, "bet_number"),
            ("XA", -1, 10, "bet_number"),
            ("XA", "5", 10, "bet_number"),
        ],
    )
    def test_invalid_input_is_rejected_before_any_write(
        self, store, bets, accounts, stats, make_user, category, bet_number, stake, field
    ):
        make_user("alice", 100)

        with pytest.raises(InvalidInputError) as excinfo:
            bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, category, bet_number, stake)

        assert field in excinfo.value.details
        assert accounts.get_balance(store, "alice") == 100
        assert stats.get_bet_history(store, "alice") == []

    @pytest.mark.parametrize(
        ("date", "time"),
        [
            ("2026-10-17", SLOT_TIME),
            (dt.datetime(2026, 10, 17, 10, 0), SLOT_TIME),
            (SLOT_DATE, ""),
            (SLOT_DATE, "   "),
            (SLOT_DATE, "x" * 21),
        ],
    )
    def test_invalid_slot_is_rejected(self, store, bets, make_user, date, time):
        make_user("alice", 100)

        with pytest.raises(InvalidInputError):
            bets.place_bet(store, "alice", date, time, "XA", 5, 10)

    def test_unknown_user(self, store, bets):
        with pytest.raises(UserNotFoundError):
            bets.place_bet(store, "ghost", SLOT_DATE, SLOT_TIME, "XA", 5, 10)

    def test_inactive_user(self, store, bets, accounts, make_user):
        make_user("alice", 100)
        accounts.set_user_active(store, "alice", False)

        with pytest.raises(InactiveUserError):
            bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)

        assert accounts.get_balance(store, "alice") == 100

    def test_slot_with_published_result_is_closed(self, store, bets, accounts, make_user, insert_result):
        make_user("alice", 100)
        insert_result({"XA": 5})

        with pytest.raises(SlotClosedError) as excinfo:
            bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)

        assert excinfo.value.code == "slot_closed"
        assert accounts.get_balance(store, "alice") == 100

    def test_other_slots_stay_open(self, store, bets, make_user, insert_result):
        make_user("alice", 100)
        insert_result({"XA": 5})

        bet = bets.place_bet(store, "alice", SLOT_DATE, "11:00", "XA", 5, 10)

        assert bet.time == "11:00"
