"""JSON envelope shared by every endpoint: ``{"success", "data", "error"}``."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify

from wagerbook.errors import AppError


def _envelope(data: Any, error: dict[str, Any] | None) -> Response:
    return jsonify({"success": error is None, "data": data, "error": error})


def ok(data: Any, status_code: int = 200) -> tuple[Response, int]:
    return _envelope(data, None), status_code


def fail(code: str, message: str, status_code: int, details: Any | None = None) -> tuple[Response, int]:
    return _envelope(None, {"code": code, "message": message, "details": details}), status_code


def fail_from(exc: AppError, status_code: int) -> tuple[Response, int]:
    """Envelope for a domain error; the caller decides the HTTP status."""

    return fail(exc.code, exc.message, status_code, exc.details)
