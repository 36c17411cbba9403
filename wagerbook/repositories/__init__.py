"""Repositories: query logic for the ledger tables."""

from wagerbook.repositories.bet_repository import BetRepository
from wagerbook.repositories.result_repository import ResultRepository
from wagerbook.repositories.transaction_repository import TransactionRepository
from wagerbook.repositories.user_repository import UserRepository

__all__ = ["BetRepository", "ResultRepository", "TransactionRepository", "UserRepository"]
