"""
SQLAlchemy 2.0 Models
"""

from vidsearch.models.base import Base, BaseModel  # noqa: F401
from vidsearch.models.search_history import SearchHistory  # noqa: F401
from vidsearch.models.video import Video  # noqa: F401

__all__ = [
    "Base",
    "BaseModel",
    "SearchHistory",
    "Video",
]
