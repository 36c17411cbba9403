"""Flask application package."""

from __future__ import annotations

from typing import Any

from dotenv import load_dotenv
from flask import Flask


def create_app(overrides: dict[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        overrides: config values applied after the environment config
            (tests pass DATABASE_URL here).

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from wagerbook.config import get_config
    from wagerbook.db import init_db
    from wagerbook.error_handlers import register_error_handlers
    from wagerbook.logging_config import configure_logging
    from wagerbook.routes.admin import admin_bp
    from wagerbook.routes.health import health_bp
    from wagerbook.routes.results import results_bp
    from wagerbook.routes.user import user_bp
    from wagerbook.services.resolution_service import ResolutionService

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)

    app.extensions["resolver"] = ResolutionService(multiplier=int(app.config["PAYOUT_MULTIPLIER"]))

    app.register_blueprint(health_bp)
    app.register_blueprint(results_bp, url_prefix="/api")
    app.register_blueprint(user_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    return app
