"""Domain errors raised by the ledger and settlement services.

Errors carry a stable ``code``; mapping codes to HTTP statuses is the job of
``wagerbook.error_handlers``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    details: Any | None = None

    def __str__(self) -> str:
        return self.message


class InvalidInputError(AppError):
    """Malformed stake, category, number or payload. Raised before any write."""

    def __init__(self, message: str = "Invalid input", details: Any | None = None, code: str = "invalid_input") -> None:
        super().__init__(code=code, message=message, details=details)


class SlotClosedError(InvalidInputError):
    """A result is already published for the slot being wagered on."""

    def __init__(self, message: str = "Betting is closed for this slot", details: Any | None = None) -> None:
        super().__init__(message=message, details=details, code="slot_closed")


class InsufficientFundsError(AppError):
    """Balance would go below zero."""

    def __init__(self, message: str = "Insufficient tokens", details: Any | None = None) -> None:
        super().__init__(code="insufficient_funds", message=message, details=details)


class NotFoundError(AppError):
    """Resource not found."""

    def __init__(self, message: str = "Not found", details: Any | None = None, code: str = "not_found") -> None:
        super().__init__(code=code, message=message, details=details)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(message=f"User {user_id} not found", details={"user_id": user_id}, code="user_not_found")


class BetNotFoundError(NotFoundError):
    def __init__(self, bet_id: int) -> None:
        super().__init__(message=f"Bet {bet_id} not found", details={"bet_id": bet_id}, code="bet_not_found")


class ResultNotFoundError(NotFoundError):
    def __init__(self, result_id: int) -> None:
        super().__init__(
            message=f"Result {result_id} not found",
            details={"result_id": result_id},
            code="result_not_found",
        )


class InactiveUserError(AppError):
    """The user exists but has been deactivated."""

    def __init__(self, user_id: str) -> None:
        super().__init__(code="user_inactive", message=f"User {user_id} is inactive", details={"user_id": user_id})


class DuplicateResultError(AppError):
    """A result was already published for the slot."""

    def __init__(self, date: Any, time: str) -> None:
        super().__init__(
            code="duplicate_result",
            message=f"Result for {date} {time} already published",
            details={"date": str(date), "time": time},
        )


class ConcurrencyConflictError(AppError):
    """Lock wait timeout or serialization failure. Safe to retry from scratch."""

    def __init__(self, message: str = "Concurrent update conflict, retry the operation", details: Any | None = None) -> None:
        super().__init__(code="concurrency_conflict", message=message, details=details)


class AuthenticationError(AppError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(code="unauthorized", message=message)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(code="forbidden", message=message)
