"""Bet resolution engine.

``resolve_bet`` is safe to call any number of times for the same bet: the
first call that claims the bet applies the payout, every later call returns
the stored bet untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from wagerbook.errors import (
    AppError,
    BetNotFoundError,
    InvalidInputError,
    ResultNotFoundError,
    UserNotFoundError,
)
from wagerbook.ledger import LedgerStore, post_entry
from wagerbook.models.bet import Bet
from wagerbook.models.enums import TransactionType
from wagerbook.models.result import Result
from wagerbook.repositories.bet_repository import BetRepository
from wagerbook.repositories.result_repository import ResultRepository
from wagerbook.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

PAYOUT_MULTIPLIER = 9


@dataclass
class ResolutionReport:
    """Outcome of a batch of resolutions.

    ``resolved`` holds bets this batch settled, ``skipped`` bets someone else
    settled first. Failed bets stay pending.
    """

    resolved: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def determine_outcome(bet: Bet, result: Result, multiplier: int = PAYOUT_MULTIPLIER) -> tuple[bool, int]:
    """Return ``(is_win, win_amount)`` for ``bet`` against ``result``.

    An unpublished (NULL) category outcome never matches, so the bet loses.
    """

    outcome = result.outcome_for(bet.category_enum)
    is_win = outcome is not None and int(bet.bet_number) == int(outcome)
    return is_win, int(bet.stake) * multiplier if is_win else 0


def _validate_resolution(is_win: object, win_amount: object) -> None:
    if not isinstance(is_win, bool):
        raise InvalidInputError(message="Invalid resolution", details={"is_win": ["Must be a boolean"]})
    if isinstance(win_amount, bool) or not isinstance(win_amount, int) or win_amount < 0:
        raise InvalidInputError(
            message="Invalid resolution",
            details={"win_amount": ["Must be a non-negative integer"]},
        )
    if is_win and win_amount == 0:
        raise InvalidInputError(
            message="Invalid resolution",
            details={"win_amount": ["A winning bet pays a positive amount"]},
        )
    if not is_win and win_amount != 0:
        raise InvalidInputError(
            message="Invalid resolution",
            details={"win_amount": ["A losing bet pays 0"]},
        )


class ResolutionService:
    """Settle pending bets against published results."""

    def __init__(
        self,
        multiplier: int = PAYOUT_MULTIPLIER,
        users: UserRepository | None = None,
        bets: BetRepository | None = None,
        results: ResultRepository | None = None,
    ) -> None:
        self._multiplier = int(multiplier)
        self._users = users or UserRepository()
        self._bets = bets or BetRepository()
        self._results = results or ResultRepository()

    def try_resolve(
        self,
        store: LedgerStore,
        bet_id: int,
        result_id: int,
        is_win: bool,
        win_amount: int,
    ) -> tuple[Bet, bool]:
        """Like :meth:`resolve_bet`, also returning whether this call claimed the bet."""

        _validate_resolution(is_win, win_amount)

        with store.transaction() as session:
            bet = self._bets.get_for_update(session, bet_id)
            if bet is None:
                raise BetNotFoundError(bet_id)

            if bet.result_id is not None:
                logger.debug("Bet %s already resolved against result %s; no-op", bet_id, bet.result_id)
                return bet, False

            result = self._results.get_by_id(session, result_id)
            if result is None:
                raise ResultNotFoundError(result_id)
            if result.date != bet.date or result.time != bet.time:
                raise InvalidInputError(
                    message="Result slot does not match bet slot",
                    details={
                        "bet_slot": [bet.date.isoformat(), bet.time],
                        "result_slot": [result.date.isoformat(), result.time],
                    },
                )

            claimed = self._bets.claim_resolution(
                session,
                bet_id,
                result_id=result_id,
                is_win=is_win,
                win_amount=win_amount,
            )
            session.refresh(bet)
            if not claimed:
                logger.debug("Bet %s claimed by a concurrent resolver; no-op", bet_id)
                return bet, False

            if is_win:
                user = self._users.get_for_update(session, bet.user_id)
                if user is None:
                    raise UserNotFoundError(bet.user_id)
                post_entry(
                    session,
                    user,
                    TransactionType.WIN,
                    win_amount,
                    description=f"Win from {bet.category} bet #{bet.id}",
                )

        logger.info(
            "Bet %s resolved against result %s: %s (win_amount=%s)",
            bet_id,
            result_id,
            "win" if is_win else "loss",
            win_amount,
        )
        return bet, True

    def resolve_bet(
        self,
        store: LedgerStore,
        bet_id: int,
        result_id: int,
        is_win: bool,
        win_amount: int,
    ) -> Bet:
        """Resolve one bet exactly once and credit winnings in the same transaction."""

        bet, _ = self.try_resolve(store, bet_id, result_id, is_win, win_amount)
        return bet

    def settle_bet(self, store: LedgerStore, bet_id: int, result: Result) -> Bet:
        """Compute the outcome of ``bet_id`` against ``result`` and resolve it."""

        with store.read() as session:
            bet = self._bets.get_by_id(session, bet_id)
        if bet is None:
            raise BetNotFoundError(bet_id)

        is_win, win_amount = determine_outcome(bet, result, self._multiplier)
        return self.resolve_bet(store, bet_id, result.id, is_win, win_amount)

    def _settle_each(self, store: LedgerStore, pairs: list[tuple[Bet, Result]]) -> ResolutionReport:
        report = ResolutionReport()
        for bet, result in pairs:
            try:
                is_win, win_amount = determine_outcome(bet, result, self._multiplier)
                _, claimed = self.try_resolve(store, bet.id, result.id, is_win, win_amount)
            except (AppError, SQLAlchemyError, ValueError) as exc:
                logger.warning("Resolution of bet %s failed: %s", bet.id, exc)
                report.failed[bet.id] = str(exc)
            else:
                (report.resolved if claimed else report.skipped).append(bet.id)
        return report

    def resolve_slot(self, store: LedgerStore, result: Result) -> ResolutionReport:
        """Settle every pending bet of ``result``'s slot. One failure never aborts the rest."""

        with store.read() as session:
            pending = self._bets.list_pending_for_slot(session, result.date, result.time)

        report = self._settle_each(store, [(bet, result) for bet in pending])
        logger.info(
            "Slot %s %s: %s bet(s) resolved, %s skipped, %s failed",
            result.date.isoformat(),
            result.time,
            len(report.resolved),
            len(report.skipped),
            len(report.failed),
        )
        return report

    def reconcile_pending(self, store: LedgerStore) -> ResolutionReport:
        """Repair job: settle pending bets whose slot already has a result."""

        with store.read() as session:
            pairs = list(self._bets.list_pending_with_result(session))

        report = self._settle_each(store, pairs)
        if pairs:
            logger.info(
                "Reconciliation: %s resolved, %s skipped, %s failed",
                len(report.resolved),
                len(report.skipped),
                len(report.failed),
            )
        return report
