import logging
from pathlib import Path

from flask import Flask, request
from sqlalchemy.engine.url import make_url

from config import Config
from extensions import db
from migrations import MigrationRunner
from services.content_cache import ContentCache


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger("migrations").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Make sure the SQLite file's directory exists before the first connect
    db_url = make_url(app.config["SQLALCHEMY_DATABASE_URI"])
    if db_url.drivername == "sqlite" and db_url.database and db_url.database != ":memory:":
        Path(db_url.database).parent.mkdir(parents=True, exist_ok=True)

    db.init_app(app)

    app.extensions["content_cache"] = ContentCache(
        ttls=app.config["SERVER_CACHE_TTLS"],
        default_ttl=app.config["CACHE_DEFAULT_TTL"],
        max_entries=app.config.get("CACHE_MAX_ENTRIES"),
    )

    # Register blueprints
    from routes.booking import booking_bp
    from routes.content import content_bp
    from routes.payments import payments_bp
    from routes.tickets import tickets_bp
    from routes.verification import verification_bp

    app.register_blueprint(content_bp, url_prefix="/api")
    app.register_blueprint(booking_bp, url_prefix="/api")
    app.register_blueprint(payments_bp, url_prefix="/api")
    app.register_blueprint(tickets_bp, url_prefix="/api")
    app.register_blueprint(verification_bp, url_prefix="/api")

    from app.errors import register_error_handlers

    register_error_handlers(app)

    cors_origin = app.config.get("CORS_ORIGIN")
    allowed_origins = {
        cors_origin,
        cors_origin.replace("127.0.0.1", "localhost") if cors_origin else None,
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    }
    allowed_origins = {o for o in allowed_origins if o}

    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and (cors_origin == "*" or origin in allowed_origins):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, PUT, DELETE, OPTIONS"
        return response

    @app.before_request
    def handle_options():
        if request.method == "OPTIONS":
            resp = app.make_default_options_response()
            return add_cors_headers(resp)

    @app.after_request
    def apply_cors(response):
        return add_cors_headers(response)

    @app.route("/health", methods=["GET"])
    def health():
        return {"status": "ok"}, 200

    from cli import register_cli

    register_cli(app)

    if app.config.get("RUN_MIGRATIONS_ON_STARTUP"):
        with app.app_context():
            # Raises MigrationError and aborts startup on failure
            MigrationRunner(db.engine).upgrade()

    return app
