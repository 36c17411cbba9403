"""Marshmallow schemas for bets."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from wagerbook.models.enums import Category

CATEGORY_VALUES = [c.value for c in Category]


class BetRequestSchema(Schema):
    """Validate a place-bet payload."""

    date = fields.Date(required=True)
    time = fields.String(required=True, validate=validate.Length(min=1, max=20))
    category = fields.String(required=True, validate=validate.OneOf(CATEGORY_VALUES))
    bet_number = fields.Integer(required=True, strict=True, validate=validate.Range(min=0, max=9))
    stake = fields.Integer(required=True, strict=True, validate=validate.Range(min=1))


class BetSchema(Schema):
    """Serialize Bet."""

    id = fields.Int(required=True)
    user_id = fields.Str(required=True)
    date = fields.Date()
    time = fields.Str()
    category = fields.Str()
    bet_number = fields.Int()
    stake = fields.Int()
    is_win = fields.Bool(allow_none=True)
    win_amount = fields.Int(allow_none=True)
    result_id = fields.Int(allow_none=True)
    is_pending = fields.Bool(dump_only=True)
    created_at = fields.DateTime()


class ResolveBetSchema(Schema):
    """Admin resolution payload.

    Omit both ``is_win`` and ``win_amount`` to compute them from the result, or
    give both to record an explicit outcome.
    """

    result_id = fields.Integer(required=True, strict=True)
    is_win = fields.Boolean(required=False, load_default=None)
    win_amount = fields.Integer(required=False, strict=True, load_default=None, validate=validate.Range(min=0))

    @validates_schema
    def _validate_outcome(self, data, **kwargs):  # type: ignore[no-untyped-def]
        is_win = data.get("is_win")
        win_amount = data.get("win_amount")
        if is_win is None:
            if win_amount is not None:
                raise ValidationError({"win_amount": ["win_amount requires is_win"]})
            return
        if win_amount is None:
            raise ValidationError({"win_amount": ["win_amount is required when is_win is given"]})
        if is_win and win_amount == 0:
            raise ValidationError({"win_amount": ["A winning bet pays a positive amount"]})
        if not is_win and win_amount != 0:
            raise ValidationError({"win_amount": ["A losing bet pays 0"]})
