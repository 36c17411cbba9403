"""Result ingestion: publish a slot's outcomes once, then settle its bets."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError

from wagerbook.errors import DuplicateResultError, InvalidInputError, ResultNotFoundError
from wagerbook.ledger import LedgerStore
from wagerbook.models.enums import Category
from wagerbook.models.result import OUTCOME_COLUMNS, Result
from wagerbook.repositories.result_repository import ResultRepository
from wagerbook.services.bet_service import validate_slot
from wagerbook.services.resolution_service import ResolutionReport, ResolutionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedResult:
    result: Result
    report: ResolutionReport


def normalize_outcomes(outcomes: Mapping[Any, Any] | None) -> dict[str, int | None]:
    """Map category -> digit into result column values; absent categories stay NULL."""

    columns: dict[str, int | None] = {column: None for column in OUTCOME_COLUMNS.values()}
    errors: dict[str, list[str]] = {}

    for key, value in (outcomes or {}).items():
        try:
            category = Category.parse(key)
        except ValueError:
            errors[str(key)] = ["Unknown category"]
            continue
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 9:
            errors[category.value] = ["Must be an integer within 0..9 or null"]
            continue
        columns[OUTCOME_COLUMNS[category]] = value

    if errors:
        raise InvalidInputError(message="Invalid outcomes", details=errors)
    return columns


class ResultService:
    """Publish results and read them back."""

    def __init__(
        self,
        resolver: ResolutionService | None = None,
        results: ResultRepository | None = None,
    ) -> None:
        self._resolver = resolver or ResolutionService()
        self._results = results or ResultRepository()

    def publish_result(
        self,
        store: LedgerStore,
        date: dt.date,
        time: str,
        outcomes: Mapping[Any, Any] | None,
    ) -> PublishedResult:
        """Insert the result for a slot and settle the slot's pending bets.

        Publishing twice for the same slot raises ``DuplicateResultError``
        without touching the first result or re-running resolution.
        """

        slot_date, slot_time = validate_slot(date, time)
        columns = normalize_outcomes(outcomes)

        try:
            with store.transaction() as session:
                if self._results.get_by_slot(session, slot_date, slot_time) is not None:
                    raise DuplicateResultError(slot_date, slot_time)
                result = self._results.create(session, slot_date, slot_time, columns)
        except IntegrityError as exc:
            # Lost a race with a concurrent publisher on uq_results_slot.
            raise DuplicateResultError(slot_date, slot_time) from exc

        logger.info("Result %s published for %s %s", result.id, slot_date.isoformat(), slot_time)

        report = self._resolver.resolve_slot(store, result)
        return PublishedResult(result=result, report=report)

    def get_result(self, store: LedgerStore, date: dt.date, time: str) -> Result | None:
        with store.read() as session:
            return self._results.get_by_slot(session, date, time)

    def get_result_by_id(self, store: LedgerStore, result_id: int) -> Result:
        with store.read() as session:
            result = self._results.get_by_id(session, result_id)
        if result is None:
            raise ResultNotFoundError(result_id)
        return result

    def get_results(
        self,
        store: LedgerStore,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
    ) -> Sequence[Result]:
        if start_date is not None and end_date is not None and start_date > end_date:
            raise InvalidInputError(
                message="Invalid date range",
                details={"start_date": ["Must be on or before end_date"]},
            )
        with store.read() as session:
            return self._results.list_range(session, start_date, end_date)
