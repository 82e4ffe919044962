# embeddy/infrastructure/persistence/sqlalchemy/models.py

from sqlalchemy import Column, Integer, String, Text

from embeddy.infrastructure.persistence.sqlalchemy.base import Base


# ------------------------------------------------------------------ #
# Registered model ORM (one row per alias-or-name)
# ------------------------------------------------------------------ #
class RegisteredModel(Base):
    __tablename__ = "models"

    key = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    hf_repo_id = Column(String(255), nullable=False)
    alias = Column(String(255), nullable=True)
    model_path = Column(Text, nullable=False)
    embedding_dim = Column(Integer, nullable=True)
    downloaded_at = Column(String(64), nullable=False, default="")
