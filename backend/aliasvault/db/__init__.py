"""Database package providing the declarative base, models and session helpers."""

from .base import Base  # noqa: F401
from .session import get_session_maker  # noqa: F401
from . import models  # noqa: F401

__all__ = ["Base", "get_session_maker", "models"]
