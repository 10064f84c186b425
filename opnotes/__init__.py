"""
OpNotes: surgery notes with designable print templates.
"""

from .version import VERSION

__version__ = VERSION
