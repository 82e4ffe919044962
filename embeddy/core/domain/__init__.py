from .entities import Embedding, ModelConfig, ModelInfo, TensorDescriptor
from .errors import (
    ConfigError,
    DownloadFailed,
    EmbeddingError,
    EmbeddyError,
    InvalidInput,
    ModelLoadFailed,
    ModelNotFound,
)

__all__ = [
    "Embedding",
    "ModelConfig",
    "ModelInfo",
    "TensorDescriptor",
    "EmbeddyError",
    "ModelNotFound",
    "ModelLoadFailed",
    "InvalidInput",
    "DownloadFailed",
    "ConfigError",
    "EmbeddingError",
]
