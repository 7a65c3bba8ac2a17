# backend/discpos/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate, socketio


def _allowed_origins(raw: str) -> set[str]:
    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Realtime channel: handlers register on import, presence is per process
    from . import sockets  # noqa: F401
    from .services.realtime_service import PresenceRegistry
    app.extensions["presence"] = PresenceRegistry()
    cors = app.config["CORS_ORIGINS"]
    socketio.init_app(app, cors_allowed_origins="*" if cors == "*" else sorted(_allowed_origins(cors)))

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.products import products_bp
    from .routes.sales import sales_bp
    from .routes.dashboard import dashboard_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(dashboard_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = _allowed_origins(app.config["CORS_ORIGINS"])
        if origin and ("*" in allowed_origins or origin in allowed_origins):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type, X-Socket-ID"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    @app.after_request
    def set_security_headers(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["X-DNS-Prefetch-Control"] = "off"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'self'"
        # HSTS only means something over HTTPS
        if request.is_secure:
            response.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
