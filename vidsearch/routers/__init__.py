"""
API Routers
FastAPI route handlers
"""

from vidsearch.routers import history, recommendations, search

__all__ = [
    "history",
    "recommendations",
    "search",
]
