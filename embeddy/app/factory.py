# embeddy/app/factory.py

"""
Singleton lifecycle for ModelCache:
- Initialized ONCE on first call to get_model_cache().
- To reset (e.g. for tests or settings reload), call reset_model_cache().
- Thread-safe: the cache itself serializes loads per model id.
- For multiprocess (e.g., uvicorn workers>1), each process holds its own
  singleton and loads its own copy of every model it serves.
"""

import logging
import threading

from embeddy.core.services.model_cache import ModelCache
from embeddy.infrastructure.embeddings import TableEmbedder
from embeddy.infrastructure.persistence.sqlalchemy import SqlModelRegistry, init_db
from embeddy.settings import settings
from embeddy.utils import parse_device

logger = logging.getLogger(__name__)


def get_registry() -> SqlModelRegistry:
    init_db()
    return SqlModelRegistry()


_model_cache = None
_model_cache_lock = threading.Lock()


def get_model_cache(force_reload: bool = False) -> ModelCache:
    global _model_cache
    with _model_cache_lock:
        if force_reload or _model_cache is None:
            device = parse_device(settings.device)
            logger.info(f"Creating model cache (device: {device})")
            _model_cache = ModelCache(
                registry=get_registry(), loader=TableEmbedder.load, device=device
            )
        return _model_cache


def reset_model_cache():
    """
    Reset the singleton model cache (for tests, dev, or controlled reload).
    Loaded models are dropped with it.
    """
    global _model_cache
    with _model_cache_lock:
        _model_cache = None
