"""
File: embeddy/infrastructure/embeddings/__init__.py
Embedder implementations.
"""

from .table_embedder import TableEmbedder

__all__ = ["TableEmbedder"]
