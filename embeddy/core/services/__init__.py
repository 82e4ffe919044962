from .model_cache import ModelCache

__all__ = ["ModelCache"]
