# embeddy/infrastructure/persistence/sqlalchemy/base.py

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from embeddy.settings import settings

Base = declarative_base()

# SQLite file lives under settings.data_dir; connection is lazy
engine = create_engine(
    settings.registry_url, connect_args={"check_same_thread": False}
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(bind=None) -> None:
    """Create the data dirs and the registry tables if missing."""
    settings.ensure_dirs()
    # models must be imported so their tables are registered on Base
    from embeddy.infrastructure.persistence.sqlalchemy import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
