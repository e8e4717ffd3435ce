from __future__ import annotations

import logging
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from storefront.app.config import Config
from storefront.app.extensions import cors
from storefront.app.common.errors import ApiError, api_error_from
from storefront.app.common.request_context import current_request_id, init_request_id
from storefront.app.api.register import register_api_blueprints
from storefront.app.cli import cli_bp
from storefront.app.models import render_stars, short_id
from storefront.app.ui import ui_bp
from storefront.backend.client import BackendClient
from storefront.backend.errors import StorefrontError


def create_app(config_object: type[Config] = Config, backend: BackendClient | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # Basic logging (enough for debugging backend calls)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    # Extensions
    cors.init_app(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS") or "*"}})
    app.extensions["storefront_backend"] = backend or BackendClient.from_config(
        app.config, request_id=current_request_id
    )

    # Request id
    @app.before_request
    def _before_request():
        init_request_id()

    # Health endpoint (for Docker)
    @app.get("/health")
    def health():
        return {"status": "ok"}, 200

    # Register API blueprints
    register_api_blueprints(app)

    # CLI (flask shop ...)
    app.register_blueprint(cli_bp)

    # Server-rendered pages
    app.register_blueprint(ui_bp)
    app.jinja_env.globals.update(render_stars=render_stars, short_id=short_id)

    # Error handlers
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        from flask import g

        return jsonify(err.to_dict(getattr(g, "request_id", None))), err.status_code

    @app.errorhandler(StorefrontError)
    def handle_storefront_error(err: StorefrontError):
        return handle_api_error(api_error_from(err))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        from flask import g

        # Normalize Werkzeug errors into our JSON shape
        payload = {
            "error": {
                "code": "http_error",
                "message": err.description,
                "details": {"name": err.name},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), err.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        app.logger.exception("Unhandled exception")
        from flask import g

        payload = {
            "error": {
                "code": "internal_error",
                "message": "Internal server error",
                "details": {},
                "request_id": getattr(g, "request_id", None),
            }
        }
        return jsonify(payload), 500

    return app
