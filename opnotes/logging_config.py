"""
Logging configuration for the OpNotes application.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Any


def configure_logging(app_instance: Any) -> logging.Logger:
    """
    Configure logging for the application.

    Log files go to the directory named by the LOG_DIR config value, or to
    ``logs`` under the application root. Setting LOG_TO_FILE to False keeps
    output on the console only (used by the tests).

    Args:
        app_instance: The Flask application instance

    Returns:
        The configured root logger
    """
    # Get log level from config or environment, default to INFO
    log_level_name = app_instance.config.get(
        "LOG_LEVEL", os.environ.get("LOG_LEVEL", "INFO")
    )
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers to avoid duplicates when reloading in debug mode
    if root_logger.handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

    # Create formatters
    verbose_formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s in %(module)s [%(pathname)s:%(lineno)d]: %(message)s"
    )
    simple_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    error_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s (%(module)s:%(lineno)d): %(message)s"
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if app_instance.config.get("LOG_TO_FILE", True):
        logs_dir = app_instance.config.get("LOG_DIR") or os.path.join(
            app_instance.root_path, "logs"
        )
        os.makedirs(logs_dir, exist_ok=True)

        main_log_file = os.path.join(logs_dir, "opnotes.log")
        error_log_file = os.path.join(logs_dir, "errors.log")

        # Main file handler (rotating log files)
        file_handler = RotatingFileHandler(
            main_log_file, maxBytes=10485760, backupCount=10  # 10MB
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(verbose_formatter)

        # Error file handler (only ERROR and CRITICAL)
        error_handler = RotatingFileHandler(
            error_log_file, maxBytes=10485760, backupCount=5
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(error_formatter)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(error_handler)

        app_instance.logger.info(f"Main log file: {main_log_file}")
        app_instance.logger.info(f"Error log file: {error_log_file}")

    # Flask logger
    app_instance.logger.setLevel(log_level)
    app_instance.logger.info(
        f"OpNotes application starting with log level: {log_level_name}"
    )

    return root_logger
