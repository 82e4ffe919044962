"""
File: embeddy/infrastructure/__init__.py
Adapters for weights, tokenizers, persistence and the model hub.
"""
