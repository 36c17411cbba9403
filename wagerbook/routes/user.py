"""Routes for the calling user (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from wagerbook.auth import current_user, current_user_id
from wagerbook.db import get_ledger
from wagerbook.schemas.account import (
    AddMoneySchema,
    BetSummarySchema,
    TransactionSchema,
    UserProfileSchema,
    UserSchema,
)
from wagerbook.schemas.bet import BetRequestSchema, BetSchema
from wagerbook.services.account_service import AccountService
from wagerbook.services.bet_service import BetService
from wagerbook.services.stats_service import StatsService
from wagerbook.utils.responses import ok

user_bp = Blueprint("user", __name__)

_user_schema = UserSchema()
_profile_schema = UserProfileSchema()
_bet_request_schema = BetRequestSchema()
_bet_schema = BetSchema()
_bets_schema = BetSchema(many=True)
_transactions_schema = TransactionSchema(many=True)
_add_money_schema = AddMoneySchema()
_summary_schema = BetSummarySchema()

_accounts = AccountService()
_bets = BetService()
_stats = StatsService()


@user_bp.get("/auth/user")
def get_auth_user():
    return ok(_user_schema.dump(current_user()))


@user_bp.put("/auth/user")
def sync_auth_user():
    """Create or refresh the caller's profile (called by the auth layer on login)."""

    payload = request.get_json(silent=True) or {}
    data = _profile_schema.load(payload)
    user = _accounts.upsert_user(get_ledger(), current_user_id(), **data)
    return ok(_user_schema.dump(user))


@user_bp.get("/user/balance")
def get_balance():
    balance = _accounts.get_balance(get_ledger(), current_user().id)
    return ok({"token_balance": balance})


@user_bp.get("/user/bets")
def list_bets():
    bets = _stats.get_bet_history(get_ledger(), current_user().id)
    return ok(_bets_schema.dump(bets))


@user_bp.post("/user/bets")
def place_bet():
    payload = request.get_json(silent=True) or {}
    data = _bet_request_schema.load(payload)

    bet = _bets.place_bet(
        get_ledger(),
        current_user().id,
        date=data["date"],
        time=data["time"],
        category=data["category"],
        bet_number=int(data["bet_number"]),
        stake=int(data["stake"]),
    )
    return ok(_bet_schema.dump(bet), status_code=201)


@user_bp.get("/user/summary")
def bet_summary():
    summary = _stats.bet_summary(get_ledger(), current_user().id)
    return ok(_summary_schema.dump(summary))


@user_bp.get("/user/transactions")
def list_transactions():
    entries = _stats.get_transaction_history(get_ledger(), current_user().id)
    return ok(_transactions_schema.dump(entries))


@user_bp.post("/user/add-money")
def add_money():
    payload = request.get_json(silent=True) or {}
    data = _add_money_schema.load(payload)
    user = _accounts.add_money(get_ledger(), current_user().id, int(data["amount"]))
    return ok(_user_schema.dump(user))
