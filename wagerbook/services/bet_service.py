"""Bet placement: reserve the stake and record a pending bet atomically."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from wagerbook.errors import (
    InactiveUserError,
    InsufficientFundsError,
    InvalidInputError,
    SlotClosedError,
    UserNotFoundError,
)
from wagerbook.ledger import LedgerStore, post_entry
from wagerbook.models.bet import Bet
from wagerbook.models.enums import Category, TransactionType
from wagerbook.repositories.bet_repository import BetRepository
from wagerbook.repositories.result_repository import ResultRepository
from wagerbook.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

MAX_TIME_SLOT_LENGTH = 20


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_slot(date: Any, time: Any) -> tuple[dt.date, str]:
    """Validate a ``(date, time)`` slot; return it normalized."""

    errors: dict[str, list[str]] = {}
    if not isinstance(date, dt.date) or isinstance(date, dt.datetime):
        errors["date"] = ["Must be a calendar date"]
    slot_time = time.strip() if isinstance(time, str) else ""
    if not slot_time or len(slot_time) > MAX_TIME_SLOT_LENGTH:
        errors["time"] = [f"Must be a non-empty string of at most {MAX_TIME_SLOT_LENGTH} characters"]
    if errors:
        raise InvalidInputError(message="Invalid slot", details=errors)
    return date, slot_time


class BetService:
    """Bet placement use-case."""

    def __init__(
        self,
        users: UserRepository | None = None,
        bets: BetRepository | None = None,
        results: ResultRepository | None = None,
    ) -> None:
        self._users = users or UserRepository()
        self._bets = bets or BetRepository()
        self._results = results or ResultRepository()

    def _validate(self, category: Any, bet_number: Any, stake: Any) -> Category:
        errors: dict[str, list[str]] = {}

        parsed: Category | None = None
        try:
            parsed = Category.parse(category)
        except ValueError:
            errors["category"] = ["Must be one of " + "|".join(c.value for c in Category)]

        if not _is_int(bet_number) or not 0 <= bet_number <= 9:
            errors["bet_number"] = ["Must be an integer within 0..9"]

        if not _is_int(stake) or stake <= 0:
            errors["stake"] = ["Must be a positive integer"]

        if errors or parsed is None:
            raise InvalidInputError(message="Invalid bet", details=errors)
        return parsed

    def place_bet(
        self,
        store: LedgerStore,
        user_id: str,
        date: dt.date,
        time: str,
        category: Category | str,
        bet_number: int,
        stake: int,
    ) -> Bet:
        """Reserve ``stake`` from the user's balance and create a pending bet.

        Either the bet row, the balance debit and the ``bet`` ledger entry all
        commit, or none of them do.
        """

        slot_date, slot_time = validate_slot(date, time)
        parsed = self._validate(category, bet_number, stake)

        with store.transaction() as session:
            user = self._users.get_for_update(session, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            if not user.is_active:
                raise InactiveUserError(user_id)

            if self._results.get_by_slot(session, slot_date, slot_time) is not None:
                raise SlotClosedError(details={"date": slot_date.isoformat(), "time": slot_time})

            if user.token_balance < stake:
                raise InsufficientFundsError(
                    details={"user_id": user_id, "balance": int(user.token_balance), "requested": stake},
                )

            bet = self._bets.create(
                session,
                user_id=user_id,
                date=slot_date,
                time=slot_time,
                category=parsed.value,
                bet_number=bet_number,
                stake=stake,
            )
            post_entry(
                session,
                user,
                TransactionType.BET,
                stake,
                description=f"Bet on {parsed.value} - {bet_number}",
            )

        logger.info(
            "Bet %s placed user=%s slot=%s %s %s#%s stake=%s",
            bet.id,
            user_id,
            slot_date.isoformat(),
            slot_time,
            parsed.value,
            bet_number,
            stake,
        )
        return bet
