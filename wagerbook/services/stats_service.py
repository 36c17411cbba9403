"""Read-only aggregation over the ledger tables."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from wagerbook.errors import UserNotFoundError
from wagerbook.ledger import LedgerStore
from wagerbook.models.bet import Bet
from wagerbook.models.transaction import Transaction
from wagerbook.repositories.bet_repository import BetRepository
from wagerbook.repositories.transaction_repository import TransactionRepository
from wagerbook.repositories.user_repository import UserRepository


@dataclass(frozen=True)
class PlatformStats:
    total_users: int
    active_users: int
    total_bets: int
    total_tokens: int


@dataclass(frozen=True)
class BetSummary:
    total_bets: int
    pending: int
    won: int
    lost: int
    total_staked: int
    total_won: int


@dataclass(frozen=True)
class LedgerAudit:
    """Replay of a user's transaction log against the cached balance."""

    user_id: str
    cached_balance: int
    replayed_balance: int
    entries: int
    broken_entries: list[int]

    @property
    def consistent(self) -> bool:
        return not self.broken_entries and self.cached_balance == self.replayed_balance


class StatsService:
    """Totals, histories and ledger audits."""

    def __init__(
        self,
        users: UserRepository | None = None,
        bets: BetRepository | None = None,
        transactions: TransactionRepository | None = None,
    ) -> None:
        self._users = users or UserRepository()
        self._bets = bets or BetRepository()
        self._transactions = transactions or TransactionRepository()

    def get_bet_history(self, store: LedgerStore, user_id: str) -> Sequence[Bet]:
        with store.read() as session:
            return self._bets.list_for_user(session, user_id)

    def get_transaction_history(self, store: LedgerStore, user_id: str) -> Sequence[Transaction]:
        with store.read() as session:
            return self._transactions.list_for_user(session, user_id)

    def platform_stats(self, store: LedgerStore) -> PlatformStats:
        with store.read() as session:
            return PlatformStats(
                total_users=self._users.count(session),
                active_users=self._users.count(session, active_only=True),
                total_bets=self._bets.count(session),
                total_tokens=self._users.total_tokens(session),
            )

    def bet_summary(self, store: LedgerStore, user_id: str) -> BetSummary:
        bets = self.get_bet_history(store, user_id)
        resolved = [b for b in bets if not b.is_pending]
        return BetSummary(
            total_bets=len(bets),
            pending=len(bets) - len(resolved),
            won=sum(1 for b in resolved if b.is_win),
            lost=sum(1 for b in resolved if not b.is_win),
            total_staked=sum(int(b.stake) for b in bets),
            total_won=sum(int(b.win_amount or 0) for b in resolved),
        )

    def audit_ledger(self, store: LedgerStore, user_id: str) -> LedgerAudit:
        """Replay the log from zero in creation order.

        Every entry's ``balance_after`` must equal the running sum, and the
        final sum must equal the cached ``token_balance``.
        """

        with store.read() as session:
            user = self._users.get_by_id(session, user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            entries = self._transactions.list_for_user_chronological(session, user_id)

        running = 0
        broken: list[int] = []
        for entry in entries:
            running += entry.signed_amount
            if running != entry.balance_after:
                broken.append(entry.id)

        return LedgerAudit(
            user_id=user_id,
            cached_balance=int(user.token_balance),
            replayed_balance=running,
            entries=len(entries),
            broken_entries=broken,
        )
