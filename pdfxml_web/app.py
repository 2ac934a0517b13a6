# --- pdfxml_web/app.py ---
import os
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .services.config_service import ConfigService
from .services.storage_service import StorageService

APP_DIR = os.path.join(os.path.expanduser("~"), ".pdfxml")
log = logging.getLogger("pdfxml_web.app")


def create_app(config_overrides=None):
    """
    Builds the conversion service application.
    Args:
        config_overrides (dict): Values applied over the defaults, e.g.
            DATABASE and CONFIG_PATH for a test instance.
    """
    app = Flask(__name__)
    app.config.from_mapping(
        DATABASE=os.path.join(APP_DIR, "pdfxml.db"),
        CONFIG_PATH=os.path.join(APP_DIR, "pdfxml.cfg"),
        # Hard ceiling for request bodies; [Conversion] max_upload_mb is the usual limit.
        MAX_CONTENT_LENGTH=100 * 1024 * 1024,
    )
    if config_overrides:
        app.config.from_mapping(config_overrides)
        log.info("Applied configuration overrides: %s", ", ".join(sorted(config_overrides)))

    _init_services(app)

    from .api import conversions

    app.register_blueprint(conversions.bp, url_prefix="/api/conversions")
    _register_error_handlers(app)

    @app.route("/health")
    def health_check():
        return "OK"

    return app


def _init_services(app):
    """Attaches storage and settings services and makes sure the schema exists."""
    try:
        app.storage = StorageService(app.config["DATABASE"])
        app.config_service = ConfigService(app.config["CONFIG_PATH"])
        app.storage.init_db()
    except Exception as e:
        log.error("Could not initialize services: %s", e, exc_info=True)
        raise
    log.info("Services ready (database: %s).", app.config["DATABASE"])


def _register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify(error=e.description), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        # Details go to the log only.
        log.exception("Unhandled error: %s", e)
        return jsonify(error="An internal server error occurred."), 500
