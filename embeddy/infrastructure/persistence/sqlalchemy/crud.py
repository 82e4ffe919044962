# embeddy/infrastructure/persistence/sqlalchemy/crud.py
from typing import Optional

from sqlalchemy.orm import Session

from embeddy.infrastructure.persistence.sqlalchemy.models import RegisteredModel


def get_model(db: Session, key: str) -> Optional[RegisteredModel]:
    return db.get(RegisteredModel, key)


def list_models(db: Session) -> list[RegisteredModel]:
    return db.query(RegisteredModel).order_by(RegisteredModel.key).all()


def upsert_model(db: Session, key: str, **fields) -> RegisteredModel:
    """
    Insert or replace the row stored under ``key``.
    Re-pulling a model overwrites its previous record.
    """
    row = db.get(RegisteredModel, key)
    if row is None:
        row = RegisteredModel(key=key, **fields)
        db.add(row)
    else:
        for column, value in fields.items():
            setattr(row, column, value)
    db.commit()
    return row
