"""
Flask application factory for DropCharge.
"""
from flask import Flask, jsonify
from flask_cors import CORS

from .. import __version__
from ..config import Config
from ..logger import get_logger
from .newsletter_routes import newsletter_bp
from .routes import api_bp

logger = get_logger(__name__)


def create_app() -> Flask:
    """
    Create and configure Flask application.

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)

    app.config['SECRET_KEY'] = Config.SECRET_KEY
    app.json.sort_keys = False

    # Enable CORS with configured origins
    cors_origins = Config.get_cors_origins()
    if cors_origins == ["*"]:
        CORS(app, allow_headers=["Content-Type", "X-Admin-Token"])
    else:
        CORS(app, origins=cors_origins, allow_headers=["Content-Type", "X-Admin-Token"])

    app.register_blueprint(api_bp)
    app.register_blueprint(newsletter_bp)

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return {'status': 'healthy', 'version': __version__}

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({'status': 'error', 'message': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(_error):
        return jsonify({'status': 'error', 'message': 'Method not allowed'}), 405

    logger.info("Flask app created")
    logger.info(f"Configuration: {Config.get_summary()}")

    errors = Config.validate()
    if errors:
        logger.warning(f"Configuration warnings: {errors}")

    return app
