# backend/brillix/__init__.py
from flask import Flask, g, request

from .config import Config
from .extensions import db, migrate


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .services.rate_limit_service import build_limiters
    app.extensions["rate_limiters"] = build_limiters(app.config)

    from .errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.business import business_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(business_bp)

    @app.before_request
    def apply_api_rate_limit():
        g.rate_limit = None
        if request.method == "OPTIONS" or not request.path.startswith("/api"):
            return None
        from .decorators import check_rate_limit
        check_rate_limit("api")
        return None

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin == app.config.get("CORS_ORIGIN"):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    @app.after_request
    def add_rate_limit_headers(response):
        result = getattr(g, "rate_limit", None)
        if result is not None:
            response.headers["RateLimit-Limit"] = str(result.limit)
            response.headers["RateLimit-Remaining"] = str(result.remaining)
            response.headers["RateLimit-Reset"] = str(result.reset_in)
        return response

    @app.after_request
    def log_request(response):
        user = getattr(g, "current_user", None)
        app.logger.debug(
            "%s %s %s%s",
            request.method,
            request.path,
            response.status_code,
            f" user={user.id}" if user is not None else "",
        )
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
