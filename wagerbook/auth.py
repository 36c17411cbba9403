"""Request identity.

Session handling lives upstream; it forwards the authenticated subject in the
``USER_ID_HEADER`` header. Here we only read it and enforce roles.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, g, request

from wagerbook.db import get_ledger
from wagerbook.errors import AuthenticationError, ForbiddenError, UserNotFoundError
from wagerbook.models.user import User
from wagerbook.services.account_service import AccountService

_accounts = AccountService()


def current_user_id() -> str:
    header = str(current_app.config.get("USER_ID_HEADER", "X-User-Id"))
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise AuthenticationError()
    return user_id


def current_user() -> User:
    """Load (once per request) the calling user."""

    cached: User | None = getattr(g, "current_user", None)
    if cached is not None:
        return cached
    user_id = current_user_id()
    try:
        user = _accounts.get_user(get_ledger(), user_id)
    except UserNotFoundError as exc:
        raise AuthenticationError("Unknown user") from exc
    g.current_user = user
    return user


def admin_required(view: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(view)
    def _wrapped(*args: Any, **kwargs: Any) -> Any:
        if not current_user().is_admin:
            raise ForbiddenError()
        return view(*args, **kwargs)

    return _wrapped
