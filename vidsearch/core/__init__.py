"""
Core module: Configuration, Database, Logging, Common Utilities
"""

from vidsearch.core.config import settings
from vidsearch.core.db import get_session, async_session_maker

__all__ = ["settings", "get_session", "async_session_maker"]
