"""Database package."""

from limnohub.db.base import Base
from limnohub.db.session import get_session_factory

__all__ = ["Base", "get_session_factory"]
