"""
File: embeddy/core/services/model_cache.py
Process-wide cache of loaded embedders, keyed by model identifier.

- Populated lazily: the first request for an identifier loads it.
- Single-flight: concurrent first requests for the same identifier share
  one load; all of them observe the same embedder (or the same error).
- Lookups of loaded identifiers never take the lock.
- Failed loads are not cached, the next request tries again.
- No eviction: entries live until the process exits.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any, Dict, List, Optional

from embeddy.core.ports import EmbedderLoaderPort, EmbedderPort, ModelRegistryPort

logger = logging.getLogger(__name__)


class ModelCache:
    def __init__(
        self,
        registry: ModelRegistryPort,
        loader: EmbedderLoaderPort,
        device: Any = "cpu",
    ):
        self.registry = registry
        self.loader = loader
        self.device = device
        self._entries: Dict[str, EmbedderPort] = {}
        self._inflight: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def get(self, model_id: str) -> Optional[EmbedderPort]:
        return self._entries.get(model_id)

    def loaded_models(self) -> List[str]:
        return sorted(self._entries)

    def ensure_loaded(self, model_id: str) -> EmbedderPort:
        """Return the embedder for ``model_id``, loading it on first use.

        Raises:
            ModelNotFound: the registry has no such identifier.
            ModelLoadFailed: config, weights or tokenizer are unusable.
        """
        embedder = self._entries.get(model_id)
        if embedder is not None:
            return embedder

        with self._lock:
            embedder = self._entries.get(model_id)
            if embedder is not None:
                return embedder
            future = self._inflight.get(model_id)
            is_owner = future is None
            if is_owner:
                future = Future()
                self._inflight[model_id] = future

        if not is_owner:
            logger.debug(f"Waiting for in-flight load of '{model_id}'")
            return future.result()

        try:
            embedder = self._load(model_id)
        except BaseException as exc:
            with self._lock:
                del self._inflight[model_id]
            future.set_exception(exc)
            raise

        with self._lock:
            self._entries[model_id] = embedder
            del self._inflight[model_id]
        future.set_result(embedder)
        return embedder

    def _load(self, model_id: str) -> EmbedderPort:
        model_info = self.registry.get_model(model_id)
        logger.info(f"Loading model '{model_id}' on device '{self.device}'")
        return self.loader(model_info, self.device)
