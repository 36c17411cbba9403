"""Admin routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from wagerbook.auth import admin_required
from wagerbook.db import get_ledger
from wagerbook.schemas.account import (
    AdjustTokensSchema,
    LedgerAuditSchema,
    PlatformStatsSchema,
    UserSchema,
    UserStatusSchema,
)
from wagerbook.schemas.bet import BetSchema, ResolveBetSchema
from wagerbook.schemas.result import ResolutionReportSchema, ResultPayloadSchema, ResultSchema
from wagerbook.services.account_service import AccountService
from wagerbook.services.resolution_service import ResolutionService
from wagerbook.services.result_service import ResultService
from wagerbook.services.stats_service import StatsService
from wagerbook.utils.responses import ok

admin_bp = Blueprint("admin", __name__)

_user_schema = UserSchema()
_users_schema = UserSchema(many=True)
_adjust_schema = AdjustTokensSchema()
_status_schema = UserStatusSchema()
_audit_schema = LedgerAuditSchema()
_stats_schema = PlatformStatsSchema()
_result_payload_schema = ResultPayloadSchema()
_result_schema = ResultSchema()
_report_schema = ResolutionReportSchema()
_resolve_schema = ResolveBetSchema()
_bet_schema = BetSchema()

_accounts = AccountService()
_stats = StatsService()


def _resolver() -> ResolutionService:
    return current_app.extensions["resolver"]


def _results() -> ResultService:
    return ResultService(resolver=_resolver())


@admin_bp.get("/users")
@admin_required
def list_users():
    return ok(_users_schema.dump(_accounts.list_users(get_ledger())))


@admin_bp.post("/users/<user_id>/tokens")
@admin_required
def adjust_tokens(user_id: str):
    payload = request.get_json(silent=True) or {}
    data = _adjust_schema.load(payload)
    user = _accounts.adjust_balance(
        get_ledger(),
        user_id,
        _adjust_schema.signed_amount(data),
        reason=data.get("reason"),
    )
    return ok(_user_schema.dump(user))


@admin_bp.patch("/users/<user_id>/status")
@admin_required
def set_user_status(user_id: str):
    payload = request.get_json(silent=True) or {}
    data = _status_schema.load(payload)
    user = _accounts.set_user_active(get_ledger(), user_id, bool(data["is_active"]))
    return ok(_user_schema.dump(user))


@admin_bp.get("/users/<user_id>/audit")
@admin_required
def audit_user_ledger(user_id: str):
    return ok(_audit_schema.dump(_stats.audit_ledger(get_ledger(), user_id)))


@admin_bp.post("/results")
@admin_required
def publish_result():
    """Publish a slot's outcomes; pending bets of the slot are settled right away."""

    payload = request.get_json(silent=True) or {}
    data = _result_payload_schema.load(payload)

    published = _results().publish_result(
        get_ledger(),
        data["date"],
        data["time"],
        _result_payload_schema.outcomes(data),
    )
    return ok(
        {
            "result": _result_schema.dump(published.result),
            "resolution": _report_schema.dump(published.report),
        },
        status_code=201,
    )


@admin_bp.get("/stats")
@admin_required
def platform_stats():
    return ok(_stats_schema.dump(_stats.platform_stats(get_ledger())))


@admin_bp.post("/bets/<int:bet_id>/resolve")
@admin_required
def resolve_bet(bet_id: int):
    """Resolve one bet. Repeating the call never pays twice."""

    payload = request.get_json(silent=True) or {}
    data = _resolve_schema.load(payload)
    store = get_ledger()

    if data.get("is_win") is None:
        result = _results().get_result_by_id(store, int(data["result_id"]))
        bet = _resolver().settle_bet(store, bet_id, result)
    else:
        bet = _resolver().resolve_bet(
            store,
            bet_id,
            int(data["result_id"]),
            bool(data["is_win"]),
            int(data["win_amount"]),
        )
    return ok(_bet_schema.dump(bet))


@admin_bp.post("/reconcile")
@admin_required
def reconcile():
    """Settle any pending bet whose slot already has a result."""

    report = _resolver().reconcile_pending(get_ledger())
    return ok(_report_schema.dump(report))
