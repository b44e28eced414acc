import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from config import Config
from smart_health.extensions import EXTENSION_KEY, build_services, cors

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def create_app(config_class=Config, services=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    origins = app.config.get("CORS_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    cors.init_app(app, origins=origins, supports_credentials=True)

    # Firebase / Supabase / AI clients, or fakes handed in by tests
    if services is None:
        services = build_services(app.config)
    app.extensions[EXTENSION_KEY] = services

    # Register blueprints
    from smart_health.routes.auth_routes import auth_bp
    from smart_health.routes.health_routes import health_bp
    from smart_health.routes.profile_routes import profile_bp
    from smart_health.routes.reading_routes import reading_bp
    from smart_health.routes.report_routes import report_bp
    from smart_health.routes.appointment_routes import appointment_bp
    from smart_health.routes.plan_routes import plan_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(reading_bp)
    app.register_blueprint(report_bp)
    app.register_blueprint(appointment_bp)
    app.register_blueprint(plan_bp)

    _register_error_handlers(app)

    logger.info("Smart Health Assistant backend ready (%s)", app.config.get("DEPLOYMENT"))
    return app


def _register_error_handlers(app):
    from smart_health.utils.response import error

    @app.errorhandler(404)
    def not_found(_e):
        return error("Endpoint not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return error("Method not allowed", 405)

    @app.errorhandler(413)
    def too_large(_e):
        limit_mb = (app.config.get("MAX_CONTENT_LENGTH") or 0) // (1024 * 1024)
        return error(f"File too large. Maximum size is {limit_mb}MB.", 413)

    @app.errorhandler(Exception)
    def unhandled(e):
        if isinstance(e, HTTPException):
            return error(e.description, e.code)
        logger.exception("Unhandled error")
        return error("Internal server error", 500)
