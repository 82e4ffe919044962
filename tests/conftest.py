# tests/conftest.py
import json
import logging
import os
import tempfile
from pathlib import Path

import pytest
import torch
from safetensors.torch import save_file
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from tokenizers import Tokenizer
from tokenizers.models import WordLevel
from tokenizers.pre_tokenizers import Whitespace

# --- 1. Point the data dir somewhere disposable BEFORE embeddy is imported ---
# settings and the registry engine are built at import time.
_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="embeddy-tests-"))
os.environ["EMBEDDY_DATA_DIR"] = str(_TEST_DATA_DIR)
os.environ.pop("EMBEDDY_MODELS_DIR", None)
os.environ.pop("EMBEDDY_REGISTRY_URL", None)

from embeddy.app import factory as app_factory  # noqa: E402
from embeddy.core.domain.entities import ModelInfo  # noqa: E402
from embeddy.infrastructure.persistence.sqlalchemy import Base, SqlModelRegistry  # noqa: E402
from embeddy.infrastructure.persistence.sqlalchemy import models as db_models  # noqa: E402,F401

logger = logging.getLogger(__name__)

EMBEDDING_TENSOR = "bert.embeddings.word_embeddings.weight"
VOCAB = {"[UNK]": 0, "hello": 1, "world": 2, "foo": 3}
# row i is the vector of token id i
MATRIX = [
    [0.0, 0.0, 0.0],
    [1.0, 0.0, 2.0],
    [3.0, 2.0, 0.0],
    [4.0, 4.0, 4.0],
]


def write_tokenizer(path: Path, vocab=None) -> Path:
    tokenizer = Tokenizer(WordLevel(vocab=dict(vocab or VOCAB), unk_token="[UNK]"))
    tokenizer.pre_tokenizer = Whitespace()
    tokenizer.save(str(path))
    return path


def write_config(path: Path, **fields) -> Path:
    config = {
        "model_type": "bert",
        "hidden_size": 3,
        "num_hidden_layers": 2,
        "num_attention_heads": 1,
    }
    config.update(fields)
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def model_tensors():
    return {
        EMBEDDING_TENSOR: torch.tensor(MATRIX, dtype=torch.float32),
        "bert.pooler.dense.weight": torch.zeros(3, 3),
    }


# --- 2. Tiny model directories ---
@pytest.fixture()
def model_dir(tmp_path) -> Path:
    """A 4-token, 3-dim BERT-style model stored as safetensors."""
    directory = tmp_path / "org--mini"
    directory.mkdir()
    save_file(model_tensors(), str(directory / "model.safetensors"), metadata={"format": "pt"})
    write_tokenizer(directory / "tokenizer.json")
    write_config(directory / "config.json")
    return directory


@pytest.fixture()
def legacy_model_dir(tmp_path) -> Path:
    """Same model, weights stored as a pickled ``pytorch_model.bin``."""
    directory = tmp_path / "org--legacy"
    directory.mkdir()
    torch.save(model_tensors(), directory / "pytorch_model.bin")
    write_tokenizer(directory / "tokenizer.json")
    write_config(directory / "config.json")
    return directory


@pytest.fixture()
def model_info(model_dir) -> ModelInfo:
    return ModelInfo(
        name="org/mini",
        hf_repo_id="org/mini",
        alias="mini",
        model_path=model_dir,
        embedding_dim=3,
        downloaded_at="2024-01-01T00:00:00+00:00",
    )


# --- 3. Registry on an in-memory SQLite shared by every thread ---
@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture()
def registry(session_factory) -> SqlModelRegistry:
    return SqlModelRegistry(session_factory=session_factory)


# --- 4. Reset the ModelCache singleton around every test ---
@pytest.fixture(autouse=True)
def reset_model_cache():
    app_factory.reset_model_cache()
    yield
    app_factory.reset_model_cache()
