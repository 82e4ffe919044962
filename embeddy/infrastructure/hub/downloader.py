"""
File: embeddy/infrastructure/hub/downloader.py
Pull a model from the Hugging Face Hub and register it.

Only the files the embedder needs are fetched: one weight file
(``model.safetensors`` preferred, ``pytorch_model.bin`` as fallback),
``tokenizer.json`` and ``config.json``. Legacy weights are converted right
after download.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from huggingface_hub import hf_hub_download
from huggingface_hub.errors import EntryNotFoundError, HfHubHTTPError

from embeddy.core.domain.entities import ModelConfig, ModelInfo
from embeddy.core.domain.errors import DownloadFailed, ModelLoadFailed
from embeddy.core.ports import ModelRegistryPort
from embeddy.infrastructure.weights import LEGACY_FILE, SAFETENSORS_FILE, ensure_safetensors
from embeddy.settings import settings

__all__ = ["ModelDownloader", "local_dir_for"]

logger = logging.getLogger(__name__)

_HUB_ERRORS = (HfHubHTTPError, EntryNotFoundError, OSError, ValueError)


def local_dir_for(models_dir: Path, hf_repo_id: str) -> Path:
    """``org/name`` -> ``<models_dir>/org--name``"""
    return Path(models_dir) / hf_repo_id.replace("/", "--")


class ModelDownloader:
    def __init__(
        self,
        registry: ModelRegistryPort,
        models_dir: Optional[Path] = None,
        revision: Optional[str] = None,
    ):
        self.registry = registry
        self.models_dir = Path(models_dir or settings.models_dir)
        self.revision = revision

    def _fetch(self, hf_repo_id: str, filename: str, model_dir: Path) -> Path:
        path = hf_hub_download(
            repo_id=hf_repo_id,
            filename=filename,
            revision=self.revision,
            local_dir=str(model_dir),
        )
        return Path(path)

    def _fetch_weights(self, hf_repo_id: str, model_dir: Path) -> Path:
        try:
            return self._fetch(hf_repo_id, SAFETENSORS_FILE, model_dir)
        except _HUB_ERRORS as exc:
            logger.info(f"{SAFETENSORS_FILE} unavailable ({exc}); trying {LEGACY_FILE}")
        try:
            return self._fetch(hf_repo_id, LEGACY_FILE, model_dir)
        except _HUB_ERRORS as exc:
            raise DownloadFailed(f"Could not find model file: {exc}") from exc

    def pull(self, hf_repo_id: str, alias: Optional[str] = None) -> ModelInfo:
        """Download, convert and register ``hf_repo_id``.

        Raises:
            DownloadFailed: a required file is missing on the hub or the
                transfer failed.
            ModelLoadFailed: legacy weights could not be converted.
        """
        logger.info(f"Pulling model from HuggingFace: {hf_repo_id}")
        model_dir = local_dir_for(self.models_dir, hf_repo_id)
        model_dir.mkdir(parents=True, exist_ok=True)

        logger.info("Downloading model files...")
        self._fetch_weights(hf_repo_id, model_dir)
        for filename, what in (
            (settings.tokenizer_file, "tokenizer"),
            (settings.config_file, "config"),
        ):
            try:
                self._fetch(hf_repo_id, filename, model_dir)
            except _HUB_ERRORS as exc:
                raise DownloadFailed(f"Could not find {what}: {exc}") from exc

        ensure_safetensors(model_dir)

        embedding_dim = None
        try:
            embedding_dim = ModelConfig.from_file(model_dir / settings.config_file).embedding_dim
        except ModelLoadFailed as exc:
            logger.warning(f"Could not read embedding dimension for {hf_repo_id}: {exc}")

        model_info = ModelInfo(
            name=hf_repo_id,
            hf_repo_id=hf_repo_id,
            alias=alias,
            model_path=model_dir,
            embedding_dim=embedding_dim,
            downloaded_at=datetime.now(timezone.utc).isoformat(),
        )
        self.registry.add_model(model_info)
        logger.info(f"Model '{model_info.key}' successfully pulled and registered")
        return model_info
