"""
File: embeddy/infrastructure/embeddings/table_embedder.py
Embeddings from the token-embedding table of a checkpoint.

No forward pass: each text is tokenized, the matching rows of the
embedding matrix are gathered and mean-pooled into one vector.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, List, Optional, Sequence

import torch

from embeddy.core.domain.entities import Embedding, ModelConfig, ModelInfo
from embeddy.core.domain.errors import InvalidInput, ModelLoadFailed
from embeddy.core.locator import find_embedding_tensor
from embeddy.core.pooling import mean_pool
from embeddy.core.ports import EmbedderPort, TokenizerPort
from embeddy.infrastructure.tokenizers import HFTokenizer
from embeddy.infrastructure.weights import (
    LEGACY_FILE,
    SAFETENSORS_FILE,
    TensorStore,
    ensure_safetensors,
)
from embeddy.settings import settings

__all__ = ["TableEmbedder", "resolve_weight_file"]

logger = logging.getLogger(__name__)


def resolve_weight_file(model_dir: Path) -> Path:
    """``model.safetensors`` when present, else ``pytorch_model.bin``."""
    model_file = Path(model_dir) / SAFETENSORS_FILE
    if model_file.exists():
        return model_file
    return Path(model_dir) / LEGACY_FILE


class TableEmbedder(EmbedderPort):
    """Mean-pooled token-table embedder.

    Parameters
    ----------
    store : TensorStore
        Open store holding the embedding matrix. The embedder owns it.
    tensor_name : str
        Name of the (vocab_size, embedding_dim) tensor inside ``store``.
    tokenizer : TokenizerPort
        Turns text into token ids.
    config : ModelConfig
        Decoded ``config.json``.
    """

    def __init__(
        self,
        *,
        store: TensorStore,
        tensor_name: str,
        tokenizer: TokenizerPort,
        config: ModelConfig,
        device: Any = "cpu",
    ) -> None:
        self.store = store
        self.tensor_name = tensor_name
        self.tokenizer = tokenizer
        self.config = config
        self.device = device
        self._matrix: Optional[torch.Tensor] = None
        self._matrix_lock = threading.Lock()

    @classmethod
    def load(cls, model_info: ModelInfo, device: Any = "cpu") -> "TableEmbedder":
        """Build an embedder from a model directory.

        Steps: convert legacy weights, decode ``config.json``, open the
        weight file, locate the embedding tensor, load the tokenizer.

        Raises:
            ModelLoadFailed: any of the above artifacts is missing or malformed.
        """
        model_dir = Path(model_info.model_path)
        logger.info(f"Loading model from: {model_dir}")

        ensure_safetensors(model_dir)
        config = ModelConfig.from_file(model_dir / settings.config_file)
        weight_file = resolve_weight_file(model_dir)

        store = TensorStore([weight_file], device=device)
        try:
            tensor_name = find_embedding_tensor(d.name for d in store.descriptors())
            descriptor = store.descriptor(tensor_name)
            if len(descriptor.shape) != 2:
                raise ModelLoadFailed(
                    f"Embedding tensor '{tensor_name}' must be 2-D, got shape {descriptor.shape}"
                )
            if descriptor.shape[1] != config.embedding_dim:
                logger.warning(
                    f"Embedding tensor '{tensor_name}' has width {descriptor.shape[1]} "
                    f"but config declares {config.embedding_dim}"
                )
            tokenizer = HFTokenizer.from_file(model_dir / settings.tokenizer_file)
        except BaseException:
            store.close()
            raise

        logger.info("Model loaded successfully")
        logger.info(f"  Type: {config.model_type}")
        logger.info(f"  Embedding dimension: {config.embedding_dim}")
        logger.info(f"  Hidden layers: {config.num_hidden_layers}")
        logger.info(f"  Attention heads: {config.num_attention_heads}")
        logger.debug(f"  Embedding tensor: {tensor_name} {descriptor.shape} {descriptor.dtype}")

        return cls(
            store=store,
            tensor_name=tensor_name,
            tokenizer=tokenizer,
            config=config,
            device=device,
        )

    # ------------------------------------------------------------------
    # Port Implementation
    # ------------------------------------------------------------------
    @property
    def embedding_dim(self) -> int:
        return self.config.embedding_dim

    def embed(self, texts: Sequence[str]) -> List[Embedding]:
        """Return one pooled vector per text, in input order.

        Raises:
            InvalidInput: ``texts`` is empty.
            EmbeddingError: tokenization fails, a text yields no tokens or a
                token id falls outside the embedding table.
        """
        if not texts:
            raise InvalidInput("Empty input texts")

        logger.debug(f"Encoding {len(texts)} texts")
        matrix = self.embedding_matrix()

        embeddings: List[Embedding] = []
        for text in texts:
            token_ids = self.tokenizer.encode(text, add_special_tokens=True)
            pooled = mean_pool(matrix, token_ids)
            embeddings.append(pooled.cpu().tolist())
        return embeddings

    def embedding_matrix(self) -> torch.Tensor:
        """Decode the embedding matrix once and keep it for later calls."""
        if self._matrix is None:
            with self._matrix_lock:
                if self._matrix is None:
                    self._matrix = self.store.load(self.tensor_name)
        return self._matrix

    def close(self) -> None:
        self._matrix = None
        self.store.close()
