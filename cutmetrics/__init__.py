# LOGGING MUST BE CONFIGURED BEFORE ANY OTHER IMPORTS OR LOGGING USAGE
import logging
from cutmetrics import config as settings

_handlers = [logging.StreamHandler()]
if settings.LOG_FILE:
    _handlers.append(logging.FileHandler(settings.LOG_FILE, encoding='utf-8'))
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=_handlers
)

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException


def create_app(config=None):
    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.SECRET_KEY
    CORS(app)
    app.config['MAX_ENTITIES'] = settings.MAX_ENTITIES
    app.config['ANALYSIS'] = dict(settings.ANALYSIS_DEFAULTS)

    if config:
        app.config.update(config)

    # Validate analysis defaults once at startup
    settings.load_analysis_config(app.config['ANALYSIS'])
    logging.info(f"Analysis defaults: {app.config['ANALYSIS']}, MAX_ENTITIES={app.config['MAX_ENTITIES']}")

    # Error Handler
    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description}), e.code
        logging.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500

    # Register blueprints
    from .routes.analyze import analyze_bp
    app.register_blueprint(analyze_bp)
    for rule in app.url_map.iter_rules():
        logging.debug(f"Registered route: {rule.rule} | methods={rule.methods} | endpoint={rule.endpoint}")

    return app
