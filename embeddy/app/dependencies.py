"""FastAPI dependencies for the application."""

from embeddy.app.factory import get_model_cache as _get_model_cache
from embeddy.core.services.model_cache import ModelCache


def get_model_cache() -> ModelCache:
    """Return the singleton :class:`ModelCache` instance."""
    return _get_model_cache()


__all__ = ["get_model_cache"]
