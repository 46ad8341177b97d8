"""
Server package exposing the FastAPI app and the match hub.
"""

from .app import app, create_app  # noqa: F401
from .registry import MatchHub  # noqa: F401
