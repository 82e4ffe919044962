"""
File: embeddy/app/__init__.py
FastAPI application module.
"""

from .main import app
from .dependencies import get_model_cache

__all__ = [
    "app",
    "get_model_cache"
]
