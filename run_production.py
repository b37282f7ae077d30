#!/usr/bin/env python3
"""
Server runner for the pharmacy inventory API.

Uses hot reload in development and uvloop/httptools workers elsewhere.
"""

import uvicorn

from app.core.config import get_settings


def run_server():
    """Run the FastAPI server with environment-specific configuration."""
    settings = get_settings()

    config = {
        "app": "app.main:app",
        "host": "0.0.0.0",
        "port": 8000,
        "access_log": True,
        "log_level": settings.log_level.lower(),
    }

    if settings.environment == "development":
        config.update({
            "reload": True,
            "reload_dirs": ["app"],
            "workers": 1,
        })
    else:
        config.update({
            "loop": "uvloop",
            "http": "httptools",
            "workers": 4,
            "reload": False,
            "access_log": False,
        })

    uvicorn.run(**config)

if __name__ == "__main__":
    run_server()
