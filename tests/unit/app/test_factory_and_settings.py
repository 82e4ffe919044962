# tests/unit/app/test_factory_and_settings.py
from pathlib import Path

import pytest
import torch

from embeddy.app import factory
from embeddy.core.domain.errors import ConfigError
from embeddy.core.services.model_cache import ModelCache
from embeddy.infrastructure.embeddings import TableEmbedder
from embeddy.settings import Settings, settings


# ---------- settings ----------------------------------------------------------
def test_paths_derive_from_data_dir(tmp_path):
    s = Settings(data_dir=tmp_path)
    assert s.models_dir == tmp_path / "models"
    assert s.registry_url == f"sqlite:///{tmp_path / 'models.db'}"


def test_explicit_paths_win(tmp_path):
    s = Settings(data_dir=tmp_path, models_dir=tmp_path / "elsewhere", registry_url="sqlite://")
    assert s.models_dir == tmp_path / "elsewhere"
    assert s.registry_url == "sqlite://"


def test_env_prefix(monkeypatch, tmp_path):
    monkeypatch.setenv("EMBEDDY_APP_PORT", "9999")
    monkeypatch.setenv("EMBEDDY_DEVICE", "cuda:1")
    monkeypatch.setenv("EMBEDDY_DATA_DIR", str(tmp_path))
    s = Settings()
    assert s.app_port == 9999
    assert s.device == "cuda:1"
    assert s.data_dir == tmp_path


def test_defaults():
    s = Settings(data_dir=Path("/tmp/x"))
    assert (s.app_host, s.app_port, s.device) == ("0.0.0.0", 8080, "cpu")
    assert (s.config_file, s.tokenizer_file) == ("config.json", "tokenizer.json")


def test_invalid_log_level():
    with pytest.raises(ValueError):
        Settings(log_level="LOUD")


def test_ensure_dirs(tmp_path):
    s = Settings(data_dir=tmp_path / "data")
    s.ensure_dirs()
    assert s.models_dir.is_dir()


# ---------- get_model_cache() -------------------------------------------------
def test_model_cache_is_a_singleton():
    cache = factory.get_model_cache()
    assert isinstance(cache, ModelCache)
    assert cache is factory.get_model_cache()
    assert cache.loader == TableEmbedder.load
    assert cache.device == torch.device("cpu")


def test_force_reload_and_reset():
    cache = factory.get_model_cache()
    assert factory.get_model_cache(force_reload=True) is not cache

    factory.reset_model_cache()
    assert factory._model_cache is None


def test_unavailable_device_fails_fast(monkeypatch):
    monkeypatch.setattr(settings, "device", "cuda:0")
    monkeypatch.setattr(torch.cuda, "is_available", lambda: False)
    with pytest.raises(ConfigError, match="Failed to initialize CUDA device"):
        factory.get_model_cache()
    assert factory._model_cache is None
