"""Settle pending bets whose slot already has a published result.

Run after a partially failed publication (or on a schedule). Resolution is
idempotent, so running this repeatedly never pays a bet twice.

Usage:
  python scripts/reconcile_bets.py
  python scripts/reconcile_bets.py --audit USER_ID [USER_ID ...]
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys

from dotenv import load_dotenv

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from wagerbook.config import get_config  # noqa: E402
from wagerbook.db import create_ledger_store  # noqa: E402
from wagerbook.errors import UserNotFoundError  # noqa: E402
from wagerbook.services.resolution_service import ResolutionService  # noqa: E402
from wagerbook.services.stats_service import StatsService  # noqa: E402

logger = logging.getLogger("reconcile_bets")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--audit",
        nargs="+",
        metavar="USER_ID",
        help="Also replay these users' ledgers and report mismatches",
    )
    parser.add_argument("--log-level", default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parse_args(argv)
    config = get_config()

    logging.basicConfig(
        level=getattr(logging, str(args.log_level or config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    store = create_ledger_store(
        config.DATABASE_URL,
        lock_timeout_ms=config.LOCK_TIMEOUT_MS,
        sqlite_busy_timeout=config.SQLITE_BUSY_TIMEOUT_SECONDS,
        create_tables=False,
    )

    report = ResolutionService(multiplier=config.PAYOUT_MULTIPLIER).reconcile_pending(store)
    logger.info("Resolved %s bet(s); %s failure(s)", len(report.resolved), len(report.failed))
    for bet_id, reason in sorted(report.failed.items()):
        logger.error("Bet %s still pending: %s", bet_id, reason)

    exit_code = 0 if report.ok else 1

    stats = StatsService()
    for user_id in args.audit or []:
        try:
            audit = stats.audit_ledger(store, user_id)
        except UserNotFoundError:
            logger.error("Unknown user %s", user_id)
            exit_code = 2
            continue
        if audit.consistent:
            logger.info("Ledger OK for %s (balance=%s, entries=%s)", user_id, audit.cached_balance, audit.entries)
        else:
            logger.error(
                "Ledger mismatch for %s: cached=%s replayed=%s broken=%s",
                user_id,
                audit.cached_balance,
                audit.replayed_balance,
                audit.broken_entries,
            )
            exit_code = 2

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
