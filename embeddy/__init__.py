"""
File: embeddy/__init__.py
Embeddings-only model runtime: token-table lookup + mean pooling over
on-disk safetensors weights.
"""

__version__ = "0.1.0"
