"""ORM models."""

from wagerbook.models.bet import Bet
from wagerbook.models.enums import Category, TransactionType, UserRole
from wagerbook.models.result import Result
from wagerbook.models.transaction import Transaction
from wagerbook.models.user import User

__all__ = ["Bet", "Category", "Result", "Transaction", "TransactionType", "User", "UserRole"]
