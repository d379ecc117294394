"""
Pothole Detector Web Application

A web service that checks road photos submitted with civic issue reports
and estimates whether they show a pothole.
"""

from flask import Flask
from flask_cors import CORS


def create_app(config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Enable CORS for API endpoints
    CORS(app)

    # Default configuration
    app.config['MAX_CONTENT_LENGTH'] = 5 * 1024 * 1024  # 5MB max upload
    app.config['ALLOWED_EXTENSIONS'] = {'png', 'jpg', 'jpeg', 'bmp', 'webp'}

    # Apply custom config
    if config:
        app.config.update(config)

    # Register API blueprint
    from .api import api
    app.register_blueprint(api, url_prefix='/api')

    return app
