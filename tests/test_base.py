"""
Base test class for tests that need the OpNotes application.

This module provides a BaseTestCase class that handles:
1. Setting up and tearing down the test database
2. Managing Flask app context
3. Common testing utilities

Renderer and expression tests do not need an application and use
unittest.TestCase directly.
"""

# Standard library imports
import logging
import unittest

logger = logging.getLogger("test_base")
logger.setLevel(logging.DEBUG)


class BaseTestCase(unittest.TestCase):
    """Base test class for tests that use the database."""

    @classmethod
    def setUpClass(cls):
        """Set up the test class with a shared app context."""

        # Set up root logger
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

        from opnotes.main import create_app

        cls.app = create_app(
            {
                "TESTING": True,
                "LOG_TO_FILE": False,
                "LOG_LEVEL": "DEBUG",
                "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            }
        )

        # Push app context
        cls.app_context = cls.app.app_context()
        cls.app_context.push()

        # Use the db instance that was initialized in create_app
        cls.db = cls.app.db
        cls.db.create_all()

    @classmethod
    def tearDownClass(cls):
        """Clean up the test class."""
        cls.db.session.remove()
        cls.db.drop_all()

        # Pop the app context
        cls.app_context.pop()

    def setUp(self):
        """Start every test without user templates and with blank settings."""
        from sqlalchemy import delete

        from opnotes.models import PrintTemplate, Settings

        try:
            self.db.session.execute(delete(PrintTemplate))
            settings = Settings.get_settings()
            settings.hospital = ""
            settings.subtitle = ""
            settings.unit = ""
            settings.telephone = None
            settings.timezone_name = "UTC"
            self.db.session.commit()
        except Exception as e:
            self.db.session.rollback()
            logger.error(f"Error cleaning up database: {e}")
            raise

    def tearDown(self):
        """Clean up after each test."""
        self.db.session.rollback()
