"""
Application Entry Point
Run with: python main.py or uvicorn main:app --reload
"""

import uvicorn

from vidsearch.api.main import app

if __name__ == "__main__":
    uvicorn.run(
        "vidsearch.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Auto-reload on code changes (dev only)
        log_level="info",
    )
