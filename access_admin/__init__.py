# access_admin/__init__.py
import atexit
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .clock import SystemClock
from .config import Config
from .errors import AppError
from .extensions import cors, db, dispose_engine, jwt, migrate
from .services.mailer import build_dispatcher
from .utils.session import clear_session_cookie


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    logging.getLogger("access_admin").setLevel(level)
    app.logger.setLevel(level)


def _register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(e):
        if e.status_code >= 500:
            app.logger.error("%s: %s", type(e).__name__, e.message)
        else:
            app.logger.warning("%s: %s", type(e).__name__, e.message)
        response = jsonify(success=False, error=e.message)
        if e.status_code == 401:
            clear_session_cookie(response)
        return response, e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify(success=False, error=e.description), e.code

    @app.errorhandler(Exception)
    def handle_error(e):
        app.logger.exception("Unhandled exception: %s", e)
        return jsonify(success=False, error="Internal server error"), 500


def _register_jwt_callbacks():
    def _unauthorized(message):
        response = jsonify(success=False, error=message)
        clear_session_cookie(response)
        return response, 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return _unauthorized("Session expired")

    @jwt.invalid_token_loader
    def invalid_token_callback(err_msg):
        return _unauthorized(f"Invalid session: {err_msg}")

    @jwt.unauthorized_loader
    def missing_token_callback(err_msg):
        return _unauthorized("Unauthorized")


def create_app(config_object=None, **overrides):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.config.update(overrides)
    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(
        app,
        origins=app.config["CORS_ORIGINS"],
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    app.extensions["clock"] = SystemClock()
    app.extensions["reminder_dispatcher"] = build_dispatcher(app.config)

    _register_error_handlers(app)
    _register_jwt_callbacks()

    from .routes.application_routes import applications_bp
    from .routes.auth_routes import auth_bp
    from .routes.health_routes import health_bp
    from .routes.reminder_routes import reminders_bp
    from .routes.user_routes import users_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(applications_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(reminders_bp)
    app.register_blueprint(health_bp)

    from .cli import register_cli

    register_cli(app)

    if not app.testing:
        atexit.register(dispose_engine, app)

    app.logger.info(
        "access_admin started (mail provider: %s)", app.extensions["reminder_dispatcher"].provider
    )
    return app
