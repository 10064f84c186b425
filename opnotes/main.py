"""
Main application module for the OpNotes application.
"""

# Standard library imports
import logging
import os
from typing import Any, Dict, Optional

# Third-party imports
from flask import Flask

# Local application imports
from opnotes.database_init import initialize_database
from opnotes.logging_config import configure_logging
from opnotes.models import db
from opnotes.route_registration import register_blueprints, register_error_handlers
from opnotes.translation_config import setup_babel
from opnotes.version import get_version


def create_app(test_config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Factory function to create and configure the Flask application.

    Args:
        test_config: Optional configuration dictionary for testing

    Returns:
        Configured Flask application
    """
    # Create and configure the app
    app = Flask(__name__)

    data_dir = os.environ.get("OPNOTES_DATA_DIR") or os.path.join(app.root_path, "data")

    # Default configuration
    app.config.update(
        SECRET_KEY=os.environ.get(
            "SECRET_KEY", "dev"
        ),  # Use a secure key in production
        SQLALCHEMY_DATABASE_URI=os.environ.get(
            "DATABASE_URL", f"sqlite:///{os.path.join(data_dir, 'opnotes.db')}"
        ),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        DEBUG=os.environ.get("FLASK_ENV", "development") == "development",
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),  # Default log level
        LOG_TO_FILE=os.environ.get("LOG_TO_FILE", "true").lower() != "false",
        LOG_DIR=os.environ.get("LOG_DIR"),
        BABEL_DEFAULT_LOCALE=os.environ.get("BABEL_DEFAULT_LOCALE", "en"),
        SEED_DEFAULT_TEMPLATES=os.environ.get("SEED_DEFAULT_TEMPLATES", "true").lower() != "false",
    )

    # Override config with test config if provided
    if test_config:
        app.config.update(test_config)

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and ":memory:" not in app.config["SQLALCHEMY_DATABASE_URI"]:
        os.makedirs(data_dir, exist_ok=True)

    # Configure logging
    logger = configure_logging(app)

    # Initialize database
    db.init_app(app)
    app.db = db

    # Setup Babel for internationalization
    setup_babel(app)

    # Create tables, settings and default print templates
    with app.app_context():
        initialize_database(app)

    # Register blueprints (routes) and JSON error responses
    register_blueprints(app)
    register_error_handlers(app)

    logger.info(f"OpNotes {get_version()} ready")
    return app


# Application entry point for development
if __name__ == "__main__":
    logger = logging.getLogger(__name__)

    app = create_app()

    # Start the application
    port = int(os.environ.get("PORT", 8088))
    logger.info(f"Starting OpNotes on port {port}")
    app.run(host="127.0.0.1", port=port, debug=app.config["DEBUG"])
