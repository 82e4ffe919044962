"""
File: embeddy/core/__init__.py
Core module: domain types, ports and the embedder cache.
"""

from .ports import EmbedderPort, ModelRegistryPort, TokenizerPort
from .services.model_cache import ModelCache

__all__ = ["EmbedderPort", "ModelRegistryPort", "TokenizerPort", "ModelCache"]
