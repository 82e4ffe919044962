"""
File: embeddy/core/locator.py
Find the token-embedding matrix among a checkpoint's tensor names.

Naming differs by model family, so each family gets its own predicate:

* BERT-style:  ``bert.embeddings.word_embeddings.weight``
* LLaMA-style: ``model.embed_tokens.weight``
* GPT-2-style: ``transformer.wte.weight``

Models with other names are not supported.
"""

from typing import Callable, Iterable, Tuple

from embeddy.core.domain.errors import ModelLoadFailed

__all__ = [
    "is_bert_word_embedding",
    "is_llama_embed_tokens",
    "is_gpt2_wte",
    "EMBEDDING_NAME_PATTERNS",
    "is_embedding_tensor",
    "find_embedding_tensor",
]


def is_bert_word_embedding(name: str) -> bool:
    return (
        "embeddings" in name
        and "word_embeddings" in name
        and name.endswith("weight")
    )


def is_llama_embed_tokens(name: str) -> bool:
    return name.endswith("embed_tokens.weight")


def is_gpt2_wte(name: str) -> bool:
    return name.endswith("wte.weight")


# Order is documentation only: a name matches if ANY pattern matches.
EMBEDDING_NAME_PATTERNS: Tuple[Callable[[str], bool], ...] = (
    is_bert_word_embedding,
    is_llama_embed_tokens,
    is_gpt2_wte,
)


def is_embedding_tensor(name: str) -> bool:
    return any(pattern(name) for pattern in EMBEDDING_NAME_PATTERNS)


def find_embedding_tensor(names: Iterable[str]) -> str:
    """Return the first name (in enumeration order) that looks like the
    token-embedding matrix.

    Raises:
        ModelLoadFailed: when no name matches.
    """
    for name in names:
        if is_embedding_tensor(name):
            return name
    raise ModelLoadFailed("Could not find embedding weight tensor")
