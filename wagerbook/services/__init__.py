"""Business logic: placement, resolution, ingestion, accounts and stats."""

from wagerbook.services.account_service import AccountService
from wagerbook.services.bet_service import BetService
from wagerbook.services.resolution_service import ResolutionReport, ResolutionService, determine_outcome
from wagerbook.services.result_service import PublishedResult, ResultService
from wagerbook.services.stats_service import BetSummary, LedgerAudit, PlatformStats, StatsService

__all__ = [
    "AccountService",
    "BetService",
    "BetSummary",
    "LedgerAudit",
    "PlatformStats",
    "PublishedResult",
    "ResolutionReport",
    "ResolutionService",
    "ResultService",
    "StatsService",
    "determine_outcome",
]
