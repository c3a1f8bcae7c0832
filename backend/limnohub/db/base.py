"""SQLAlchemy Base class."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    The monitoring schema is owned by another system; tables keep their
    legacy names, so every model sets ``__tablename__`` explicitly.
    """
