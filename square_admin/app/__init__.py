"""
app/__init__.py - Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time - this enables:
           - Multiple isolated test app instances
           - `alembic` to import the metadata without starting the server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Configure the app logger level from LOG_LEVEL
  3. Initialise SQLAlchemy via init_app()
  4. Register all route blueprints under /api/v1
  5. Register global error handlers (AppError / ValidationError /
     HTTPException → JSON, Exception → 500). Every handler rolls the
     session back, so a request either commits all of its writes or none.
  6. Register the `flask create-user` command used to seed the first admin
"""

from __future__ import annotations

import logging
import traceback

from flask import Flask, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from square_admin.config import config_by_name, validate_production_config


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development") -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to "development".
    """
    app = Flask(__name__)

    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    _configure_logging(app)

    # Import here (not at module top) to avoid circular imports.
    from square_admin.app.extensions import db
    db.init_app(app)

    # Import all models so that SQLAlchemy's MetaData is populated.
    with app.app_context():
        from square_admin.app.models import (  # noqa: F401
            group,
            role,
            square,
            square_user,
            timer,
            user,
        )

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_cors(app)
    _register_cli(app)

    app.logger.debug("Square admin app created with %s config", config_name)
    return app


def _configure_logging(app: Flask) -> None:
    """Applies LOG_LEVEL to the app logger and the package's module loggers."""
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)

    package_logger = logging.getLogger("square_admin")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s"
        ))
        package_logger.addHandler(handler)


def _register_blueprints(app: Flask) -> None:
    """
    Registers all route blueprints under the /api/v1 prefix.

    sqr_square_bp, sqr_team_bp and sqr_timer_bp share the /sqr-square prefix
    because teams and timers are addressed through their square.
    """
    from square_admin.app.routes.auth import auth_bp
    from square_admin.app.routes.groups import adm_group_bp
    from square_admin.app.routes.roles import sqr_role_bp
    from square_admin.app.routes.squares import sqr_square_bp
    from square_admin.app.routes.teams import sqr_team_bp
    from square_admin.app.routes.timers import sqr_timer_bp
    from square_admin.app.routes.users import adm_user_bp

    app.register_blueprint(auth_bp,       url_prefix="/api/v1/auth")
    app.register_blueprint(sqr_square_bp, url_prefix="/api/v1/sqr-square")
    app.register_blueprint(sqr_team_bp,   url_prefix="/api/v1/sqr-square")
    app.register_blueprint(sqr_timer_bp,  url_prefix="/api/v1/sqr-square")
    app.register_blueprint(sqr_role_bp,   url_prefix="/api/v1/sqr-role")
    app.register_blueprint(adm_user_bp,   url_prefix="/api/v1/adm-user")
    app.register_blueprint(adm_group_bp,  url_prefix="/api/v1/adm-group")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers.

      AppError        → structured JSON error envelope with its HTTP status
      ValidationError → first marshmallow field error as MISSING_FIELD /
                        INVALID_FIELD (400)
      HTTPException   → routing errors (404, 405, ...) as JSON
      Exception       → generic INTERNAL_ERROR (500); traceback logged

    Stack traces never leave the server.
    """
    from square_admin.app.errors import AppError, ErrorCode
    from square_admin.app.extensions import db

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        db.session.rollback()
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        db.session.rollback()

        messages = error.messages  # e.g. {"name": ["Missing data for required field."]}
        field = None
        raw_message = "Invalid input."

        if isinstance(messages, dict) and messages:
            field_name, field_errors = next(iter(messages.items()))
            field = field_name if field_name != "_schema" else None
            if isinstance(field_errors, list):
                raw_message = field_errors[0] if field_errors else "Invalid value."
            else:
                raw_message = str(field_errors)
        elif isinstance(messages, list) and messages:
            raw_message = messages[0]

        if str(raw_message).startswith("Missing data for required field"):
            code = ErrorCode.MISSING_FIELD
        else:
            code = ErrorCode.INVALID_FIELD

        response_body = {"error": {"code": code, "message": raw_message}}
        if field is not None:
            response_body["error"]["field"] = field
        return jsonify(response_body), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        db.session.rollback()
        if error.code == 404:
            code = ErrorCode.NOT_FOUND
        elif error.code == 405:
            code = ErrorCode.METHOD_NOT_ALLOWED
        else:
            code = ErrorCode.INVALID_FIELD if error.code == 400 else ErrorCode.INTERNAL_ERROR
        return jsonify({
            "error": {"code": code, "message": error.description},
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        db.session.rollback()
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({
            "error": {
                "code": ErrorCode.INTERNAL_ERROR,
                "message": "An unexpected error occurred. Please try again later.",
            }
        }), 500


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for browser-based local development.

    Enabled when DEBUG or TESTING is true so a frontend served from another
    local port can call the API with Authorization headers.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if allow_all:
            response.headers["Access-Control-Allow-Origin"] = origin if origin else "*"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = (
                "GET, POST, PUT, PATCH, DELETE, OPTIONS"
            )
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"

        return response


def _register_cli(app: Flask) -> None:
    from square_admin.app.cli import create_user_command

    app.cli.add_command(create_user_command)
