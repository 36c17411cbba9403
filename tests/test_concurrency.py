"""Races between threads sharing one ledger store."""

from __future__ import annotations

import threading

from tests.conftest import SLOT_DATE, SLOT_TIME
from wagerbook.errors import AppError, InsufficientFundsError
from wagerbook.models.enums import TransactionType


def _run_concurrently(count, target):
    barrier = threading.Barrier(count)
    outcomes: list[object] = [None] * count

    def _worker(index):
        barrier.wait()
        try:
            outcomes[index] = target(index)
        except AppError as exc:
            outcomes[index] = exc

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return outcomes


def test_racing_bets_cannot_overspend(store, bets, accounts, stats, make_user):
    make_user("alice", 100)

    outcomes = _run_concurrently(
        2,
        lambda i: bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", i, 60),
    )

    failures = [o for o in outcomes if isinstance(o, AppError)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientFundsError)
    assert accounts.get_balance(store, "alice") == 40
    assert len(stats.get_bet_history(store, "alice")) == 1


def test_many_small_bets_drain_exactly_to_zero(store, bets, accounts, stats, make_user):
    make_user("alice", 50)

    outcomes = _run_concurrently(
        8,
        lambda i: bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XB", i % 10, 10),
    )

    placed = [o for o in outcomes if not isinstance(o, AppError)]
    assert len(placed) == 5
    assert all(isinstance(o, InsufficientFundsError) for o in outcomes if isinstance(o, AppError))
    assert accounts.get_balance(store, "alice") == 0
    assert stats.audit_ledger(store, "alice").consistent


def test_racing_resolutions_pay_once(store, bets, resolver, accounts, stats, make_user, insert_result):
    make_user("alice", 100)
    bet = bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)
    result = insert_result({"XA": 5})

    outcomes = _run_concurrently(4, lambda _: resolver.resolve_bet(store, bet.id, result.id, True, 90))

    assert not any(isinstance(o, AppError) for o in outcomes)
    assert accounts.get_balance(store, "alice") == 180
    wins = [t for t in stats.get_transaction_history(store, "alice") if t.type == TransactionType.WIN.value]
    assert len(wins) == 1


def test_racing_publishers_publish_once(store, bets, results, accounts, make_user):
    make_user("alice", 100)
    bets.place_bet(store, "alice", SLOT_DATE, SLOT_TIME, "XA", 5, 10)

    outcomes = _run_concurrently(3, lambda _: results.publish_result(store, SLOT_DATE, SLOT_TIME, {"XA": 5}))

    failures = [o for o in outcomes if isinstance(o, AppError)]
    assert len(failures) == 2
    assert all(f.code == "duplicate_result" for f in failures)
    assert accounts.get_balance(store, "alice") == 180
