"""
Blueprint, health check and JSON error handler registration.
"""

import logging

from flask import jsonify, request

from opnotes.version import get_version

logger = logging.getLogger(__name__)


def register_blueprints(app):
    """Register the print template blueprint and the health endpoint."""
    from opnotes.routes.print_templates import bp as print_templates_bp

    app.register_blueprint(print_templates_bp)

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "version": get_version()})

    logger.info(f"Registered blueprints: {', '.join(app.blueprints)}")


def register_error_handlers(app):
    """Answer client errors with the same JSON shape the API uses."""

    @app.errorhandler(404)
    def not_found(e):
        logger.warning(f"Not found: {request.method} {request.path}")
        return jsonify({"success": False, "error": "Not found"}), 404

    @app.errorhandler(400)
    def bad_request(e):
        logger.warning(f"Bad request to {request.path}: {e.description}")
        return jsonify({"success": False, "error": e.description}), 400

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"success": False, "error": "Method not allowed"}), 405
