"""Public results API."""

from __future__ import annotations

from flask import Blueprint, request
from marshmallow import EXCLUDE

from wagerbook.db import get_ledger
from wagerbook.schemas.result import DateRangeSchema, ResultSchema
from wagerbook.services.result_service import ResultService
from wagerbook.utils.responses import ok

results_bp = Blueprint("results", __name__)

_range_schema = DateRangeSchema()
_results_schema = ResultSchema(many=True)
_service = ResultService()


@results_bp.get("/results")
def list_results():
    """List results, newest date first.

    Query params:
    - start_date, end_date: optional ISO dates (inclusive)
    """

    args = _range_schema.load(request.args.to_dict(), unknown=EXCLUDE)
    results = _service.get_results(get_ledger(), args.get("start_date"), args.get("end_date"))
    return ok(_results_schema.dump(results))
