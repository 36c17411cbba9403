"""Marshmallow schemas for published results."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from wagerbook.models.enums import Category


def _outcome_field() -> fields.Integer:
    return fields.Integer(
        required=False,
        strict=True,
        allow_none=True,
        load_default=None,
        validate=validate.Range(min=0, max=9),
    )


class ResultPayloadSchema(Schema):
    """Validate a publish-result payload (``xa``..``xj`` may be null or omitted)."""

    date = fields.Date(required=True)
    time = fields.String(required=True, validate=validate.Length(min=1, max=20))

    xa = _outcome_field()
    xb = _outcome_field()
    xc = _outcome_field()
    xd = _outcome_field()
    xe = _outcome_field()
    xf = _outcome_field()
    xg = _outcome_field()
    xh = _outcome_field()
    xi = _outcome_field()
    xj = _outcome_field()

    def outcomes(self, data: dict) -> dict[Category, int | None]:
        return {c: data.get(c.value.lower()) for c in Category}


class DateRangeSchema(Schema):
    start_date = fields.Date(required=False, load_default=None)
    end_date = fields.Date(required=False, load_default=None)

    @validates_schema
    def _validate_range(self, data, **kwargs):  # type: ignore[no-untyped-def]
        start = data.get("start_date")
        end = data.get("end_date")
        if start is not None and end is not None and start > end:
            raise ValidationError({"start_date": ["start_date must be <= end_date"]})


class ResultSchema(Schema):
    """Serialize Result."""

    id = fields.Int(required=True)
    date = fields.Date()
    time = fields.Str()
    outcomes = fields.Dict(keys=fields.Str(), values=fields.Int(allow_none=True), dump_only=True)
    created_at = fields.DateTime()


class ResolutionReportSchema(Schema):
    resolved = fields.List(fields.Int())
    skipped = fields.List(fields.Int())
    failed = fields.Dict(keys=fields.Str(), values=fields.Str())
