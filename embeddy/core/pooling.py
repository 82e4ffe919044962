"""Mean pooling of embedding-table rows."""

from typing import Sequence

import torch

from embeddy.core.domain.errors import EmbeddingError

__all__ = ["mean_pool"]


def mean_pool(matrix: torch.Tensor, token_ids: Sequence[int]) -> torch.Tensor:
    """Average the rows of ``matrix`` selected by ``token_ids``.

    ``pooled[i] = (1/n) * sum_t matrix[token_ids[t]][i]``

    Rows are indexed from zero. Ids outside ``[0, vocab_size)`` and empty
    sequences raise :class:`EmbeddingError`; nothing is clamped.
    The mean is computed in float32 whatever the storage dtype.
    """
    if matrix.dim() != 2:
        raise EmbeddingError(
            f"Embedding matrix must be 2-D, got shape {tuple(matrix.shape)}"
        )

    n = len(token_ids)
    if n == 0:
        raise EmbeddingError("Tokenizer produced no tokens; nothing to pool")

    vocab_size = matrix.shape[0]
    for token_id in token_ids:
        if token_id < 0 or token_id >= vocab_size:
            raise EmbeddingError(
                f"Token id {token_id} out of range for vocabulary of size {vocab_size}"
            )

    index = torch.tensor(list(token_ids), dtype=torch.long, device=matrix.device)
    rows = matrix.index_select(0, index)
    return rows.to(torch.float32).mean(dim=0)
