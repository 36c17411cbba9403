"""Health check routes."""

from __future__ import annotations

from flask import Blueprint

from wagerbook.db import get_ledger
from wagerbook.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Health check endpoint (also pings the database)."""

    get_ledger().ping()
    return ok({"status": "ok"})
