"""
File: embeddy/infrastructure/persistence/sqlalchemy/__init__.py
Model registry persisted with SQLAlchemy (SQLite by default).
"""

from .base import Base, SessionLocal, engine, init_db
from .registry import SqlModelRegistry

__all__ = ["Base", "SessionLocal", "engine", "init_db", "SqlModelRegistry"]
