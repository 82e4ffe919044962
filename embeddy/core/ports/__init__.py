from __future__ import annotations

from typing import Any, List, Protocol, Sequence, runtime_checkable

from embeddy.core.domain.entities import Embedding, ModelInfo


# -------- Ports --------
@runtime_checkable
class EmbedderPort(Protocol):
    embedding_dim: int

    def embed(self, texts: Sequence[str]) -> List[Embedding]: ...


@runtime_checkable
class TokenizerPort(Protocol):
    def encode(self, text: str, add_special_tokens: bool = True) -> List[int]: ...


@runtime_checkable
class ModelRegistryPort(Protocol):
    def get_model(self, name: str) -> ModelInfo: ...
    def add_model(self, model: ModelInfo) -> None: ...
    def list_models(self) -> Sequence[ModelInfo]: ...


@runtime_checkable
class EmbedderLoaderPort(Protocol):
    def __call__(self, model_info: ModelInfo, device: Any) -> EmbedderPort: ...
