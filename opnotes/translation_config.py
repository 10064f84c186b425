"""
Translation and internationalization configuration module.
"""

import os
import logging
from flask import has_request_context, request, session
from flask_babel import Babel, gettext, ngettext

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "en": "English",
    "si": "සිංහල",
    "ta": "தமிழ்",
}


def get_translations_dir(app):
    """Return the translations directory, preferring an explicit env var."""
    env_dir = os.environ.get("BABEL_TRANSLATION_DIRECTORIES")
    if env_dir and os.path.exists(env_dir):
        return env_dir
    return os.path.join(app.root_path, "translations")


def discover_languages(translations_dir):
    """Discover available languages from the translations directory."""
    languages = {"en": LANGUAGE_NAMES["en"]}  # Always include English

    if os.path.exists(translations_dir):
        for item in sorted(os.listdir(translations_dir)):
            messages_po = os.path.join(translations_dir, item, "LC_MESSAGES", "messages.po")
            if item != "en" and os.path.exists(messages_po):
                languages[item] = LANGUAGE_NAMES.get(item, item.upper())
                logger.debug(f"Discovered language: {item} ({languages[item]})")

    return languages


def setup_babel(app):
    """Configure and initialize Babel for internationalization."""
    translations_dir = get_translations_dir(app)
    logger.debug(f"Translations directory path: {translations_dir}")

    app.config["LANGUAGES"] = discover_languages(translations_dir)
    app.config["BABEL_TRANSLATION_DIRECTORIES"] = translations_dir

    def get_locale():
        # Printing from background jobs and tests has no request to inspect
        if not has_request_context():
            return app.config.get("BABEL_DEFAULT_LOCALE", "en")

        # 1. Check URL parameter
        if request.args.get("lang"):
            session["language"] = request.args.get("lang")
            logger.debug(f"Locale set from URL parameter: {session['language']}")

        # 2. Check user session
        if "language" in session and session["language"] in app.config["LANGUAGES"]:
            return session["language"]

        # 3. Use browser's preferred language
        return request.accept_languages.best_match(app.config["LANGUAGES"].keys()) or "en"

    babel = Babel()
    babel.init_app(app, locale_selector=get_locale)

    # Explicitly register translation functions in Jinja2
    app.jinja_env.globals.update(_=gettext, _n=ngettext, get_locale=get_locale)

    logger.debug(f"Babel languages: {list(app.config['LANGUAGES'].keys())}")
    return babel
