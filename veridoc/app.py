# veridoc/app.py

import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, NotFound, RequestEntityTooLarge

from veridoc.config import config
from veridoc.models import db
from veridoc.routes.verify import verify_bp
from veridoc.routes.proof_codes import proof_bp
from veridoc.routes.settings import settings_bp

def create_app(config_name=None):
    if config_name is None:
        config_name = os.getenv('FLASK_CONFIG', 'default')

    PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    INSTANCE_FOLDER_PATH = os.path.join(PROJECT_ROOT, 'instance')

    app = Flask(__name__, instance_path=INSTANCE_FOLDER_PATH)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    CORS(app)

    app.register_blueprint(verify_bp)
    app.register_blueprint(proof_bp)
    app.register_blueprint(settings_bp)

    with app.app_context():
        db.create_all()

    if not app.debug and not app.testing:
        log_dir = os.path.join(PROJECT_ROOT, 'logs')
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(os.path.join(log_dir, 'veridoc.log'), maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('VeriDoc Application Startup')

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        return jsonify(error="Not Found", message="The requested resource was not found."), 404

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        return jsonify(error="Payload Too Large", message="The uploaded file exceeds the size limit."), 413

    @app.errorhandler(Exception)
    def handle_generic_error(e):
        if isinstance(e, HTTPException):
            return jsonify(error=e.name, message=e.description), e.code
        app.logger.exception(f"An unhandled exception occurred: {e}")
        return jsonify(error="Internal Server Error", message="An unexpected error occurred."), 500

    @app.route("/")
    def index():
        return "✅ VeriDoc - API Service is Running"

    return app
