import logging

from flask import Flask, jsonify

from motorpool.api.auth_middleware import init_auth_middleware
from motorpool.api.errors import register_error_handlers
from motorpool.api.routes.reservations import reservations_bp, vehicles_bp
from motorpool.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app() -> Flask:
    app = Flask(__name__)

    init_auth_middleware(app)
    register_error_handlers(app)

    app.register_blueprint(reservations_bp)
    app.register_blueprint(vehicles_bp)

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = settings.frontend_url
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PATCH,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = ", ".join(
            ["Content-Type", settings.auth_user_id_header, settings.auth_user_role_header,
             settings.auth_user_email_header]
        )
        return response

    @app.get("/")
    def root():
        return jsonify({"message": "Motorpool Reservation API", "version": API_VERSION})

    @app.get("/health")
    def health():
        return jsonify({"status": "healthy"})

    logger.info(f"Application created (env={settings.flask_env})")
    return app


app = create_app()
