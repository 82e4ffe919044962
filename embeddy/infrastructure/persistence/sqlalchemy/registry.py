# embeddy/infrastructure/persistence/sqlalchemy/registry.py

from pathlib import Path
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from embeddy.core.domain.entities import ModelInfo
from embeddy.core.domain.errors import ConfigError, ModelNotFound
from embeddy.core.ports import ModelRegistryPort
from embeddy.infrastructure.persistence.sqlalchemy.base import SessionLocal
from embeddy.infrastructure.persistence.sqlalchemy.crud import (
    get_model,
    list_models,
    upsert_model,
)
from embeddy.infrastructure.persistence.sqlalchemy.models import RegisteredModel


def _to_domain(row: RegisteredModel) -> ModelInfo:
    return ModelInfo(
        name=row.name,
        hf_repo_id=row.hf_repo_id,
        alias=row.alias,
        model_path=Path(row.model_path),
        embedding_dim=row.embedding_dim,
        downloaded_at=row.downloaded_at or "",
    )


class SqlModelRegistry(ModelRegistryPort):
    """Flat key -> ModelInfo table. Key is the alias, or the repo name."""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def get_model(self, name: str) -> ModelInfo:
        session = self._session_factory()
        try:
            row = get_model(session, name)
            if row is None:
                raise ModelNotFound(name)
            return _to_domain(row)
        except SQLAlchemyError as exc:
            raise ConfigError(f"Could not read model registry: {exc}") from exc
        finally:
            session.close()

    def add_model(self, model: ModelInfo) -> None:
        session = self._session_factory()
        try:
            upsert_model(
                session,
                model.key,
                name=model.name,
                hf_repo_id=model.hf_repo_id,
                alias=model.alias,
                model_path=str(model.model_path),
                embedding_dim=model.embedding_dim,
                downloaded_at=model.downloaded_at,
            )
        except SQLAlchemyError as exc:
            session.rollback()
            raise ConfigError(f"Could not write model registry: {exc}") from exc
        finally:
            session.close()

    def list_models(self) -> Sequence[ModelInfo]:
        session = self._session_factory()
        try:
            return [_to_domain(row) for row in list_models(session)]
        except SQLAlchemyError as exc:
            raise ConfigError(f"Could not read model registry: {exc}") from exc
        finally:
            session.close()
