"""
File: embeddy/infrastructure/tokenizers/hf_tokenizer.py
Hugging Face ``tokenizers`` adapter (reads ``tokenizer.json``).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from tokenizers import Tokenizer

from embeddy.core.domain.errors import EmbeddingError, ModelLoadFailed
from embeddy.core.ports import TokenizerPort

__all__ = ["HFTokenizer"]

logger = logging.getLogger(__name__)


class HFTokenizer(TokenizerPort):
    def __init__(self, tokenizer: Tokenizer):
        self._tokenizer = tokenizer

    @classmethod
    def from_file(cls, path: Path | str) -> "HFTokenizer":
        path = Path(path)
        if not path.is_file():
            raise ModelLoadFailed(f"Failed to load tokenizer: {path} does not exist")
        try:
            tokenizer = Tokenizer.from_file(str(path))
        except Exception as exc:  # tokenizers raises a bare Exception on parse errors
            raise ModelLoadFailed(f"Failed to load tokenizer: {exc}") from exc
        logger.debug(f"Loaded tokenizer from {path} (vocab={tokenizer.get_vocab_size()})")
        return cls(tokenizer)

    @property
    def vocab_size(self) -> int:
        return self._tokenizer.get_vocab_size()

    # ------------------------------------------------------------------ #
    def encode(self, text: str, add_special_tokens: bool = True) -> List[int]:
        try:
            encoding = self._tokenizer.encode(text, add_special_tokens=add_special_tokens)
        except Exception as exc:
            raise EmbeddingError(f"Tokenization failed: {exc}") from exc
        return list(encoding.ids)
