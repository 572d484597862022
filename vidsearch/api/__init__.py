"""
API Application Factory
FastAPI app creation and configuration
"""

from vidsearch.api.main import create_app

__all__ = ["create_app"]
