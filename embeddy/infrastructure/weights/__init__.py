"""
File: embeddy/infrastructure/weights/__init__.py
Weight containers: legacy-to-safetensors conversion and mapped tensor access.
"""

from .converter import LEGACY_FILE, SAFETENSORS_FILE, ensure_safetensors
from .tensor_store import TensorStore, read_header

__all__ = [
    "LEGACY_FILE",
    "SAFETENSORS_FILE",
    "ensure_safetensors",
    "TensorStore",
    "read_header",
]
