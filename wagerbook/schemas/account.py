"""Marshmallow schemas for users, ledger entries and balance changes."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema


class UserSchema(Schema):
    """Serialize User."""

    id = fields.Str(required=True)
    email = fields.Str(allow_none=True)
    first_name = fields.Str(allow_none=True)
    last_name = fields.Str(allow_none=True)
    role = fields.Str()
    token_balance = fields.Int()
    is_active = fields.Bool()
    created_at = fields.DateTime()


class UserProfileSchema(Schema):
    """Identity sync payload from the auth layer."""

    email = fields.Email(required=False, load_default=None, allow_none=True)
    first_name = fields.String(required=False, load_default=None, allow_none=True, validate=validate.Length(max=120))
    last_name = fields.String(required=False, load_default=None, allow_none=True, validate=validate.Length(max=120))


class TransactionSchema(Schema):
    """Serialize Transaction."""

    id = fields.Int(required=True)
    user_id = fields.Str()
    type = fields.Str()
    amount = fields.Int()
    signed_amount = fields.Int(dump_only=True)
    description = fields.Str(allow_none=True)
    balance_after = fields.Int()
    created_at = fields.DateTime()


class AddMoneySchema(Schema):
    amount = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))


class AdjustTokensSchema(Schema):
    """Admin adjustment: ``amount`` is a magnitude, ``type`` picks the direction."""

    amount = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))
    type = fields.String(required=True, validate=validate.OneOf(["add", "deduct"]))
    reason = fields.String(required=False, load_default=None, allow_none=True, validate=validate.Length(max=500))

    @validates_schema
    def _validate_reason(self, data, **kwargs):  # type: ignore[no-untyped-def]
        reason = data.get("reason")
        if reason is not None and not reason.strip():
            raise ValidationError({"reason": ["reason must not be blank"]})

    def signed_amount(self, data: dict) -> int:
        amount = int(data["amount"])
        return amount if data["type"] == "add" else -amount


class UserStatusSchema(Schema):
    is_active = fields.Boolean(required=True)


class BetSummarySchema(Schema):
    total_bets = fields.Int()
    pending = fields.Int()
    won = fields.Int()
    lost = fields.Int()
    total_staked = fields.Int()
    total_won = fields.Int()


class PlatformStatsSchema(Schema):
    total_users = fields.Int()
    active_users = fields.Int()
    total_bets = fields.Int()
    total_tokens = fields.Int()


class LedgerAuditSchema(Schema):
    user_id = fields.Str()
    cached_balance = fields.Int()
    replayed_balance = fields.Int()
    entries = fields.Int()
    broken_entries = fields.List(fields.Int())
    consistent = fields.Bool(dump_only=True)
