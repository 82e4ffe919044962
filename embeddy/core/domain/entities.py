from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Tuple

from embeddy.core.domain.errors import ModelLoadFailed

Embedding = Sequence[float]

_MISSING = object()


@dataclass(frozen=True)
class ModelInfo:
    """Registry record for a pulled model."""

    name: str
    hf_repo_id: str
    model_path: Path
    alias: Optional[str] = None
    embedding_dim: Optional[int] = None
    downloaded_at: str = ""

    @property
    def key(self) -> str:
        # models are addressed by alias when one was given
        return self.alias or self.name


@dataclass(frozen=True)
class TensorDescriptor:
    name: str
    dtype: str
    shape: Tuple[int, ...]
    data_offsets: Tuple[int, int]
    path: Path

    @property
    def nbytes(self) -> int:
        start, end = self.data_offsets
        return end - start


def _first_present(raw: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return _MISSING


def _as_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


@dataclass(frozen=True)
class ModelConfig:
    """Typed view over a model's ``config.json``.

    Only ``embedding_dim`` takes part in computation. The other fields are
    reported at load time and default to common transformer values.

    Precedence (first present key wins):
        embedding_dim        hidden_size, n_embd, dim   (required)
        num_hidden_layers    num_hidden_layers, n_layer (default 12)
        num_attention_heads  num_attention_heads, n_head (default 12)
    """

    embedding_dim: int
    model_type: str = "bert"
    num_hidden_layers: int = 12
    num_attention_heads: int = 12

    DIM_KEYS = ("hidden_size", "n_embd", "dim")
    LAYER_KEYS = ("num_hidden_layers", "n_layer")
    HEAD_KEYS = ("num_attention_heads", "n_head")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ModelConfig":
        if not isinstance(raw, Mapping):
            raise ModelLoadFailed("Failed to parse config: expected a JSON object")

        embedding_dim = _as_positive_int(_first_present(raw, cls.DIM_KEYS))
        if embedding_dim is None:
            raise ModelLoadFailed("Could not determine embedding dimension")

        model_type = raw.get("model_type")
        if not isinstance(model_type, str):
            model_type = "bert"

        layers = _as_positive_int(_first_present(raw, cls.LAYER_KEYS)) or 12
        heads = _as_positive_int(_first_present(raw, cls.HEAD_KEYS)) or 12

        return cls(
            embedding_dim=embedding_dim,
            model_type=model_type,
            num_hidden_layers=layers,
            num_attention_heads=heads,
        )

    @classmethod
    def from_file(cls, path: Path) -> "ModelConfig":
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ModelLoadFailed(f"Failed to parse config: {exc}") from exc
        except OSError as exc:
            raise ModelLoadFailed(f"Failed to read config: {exc}") from exc
        try:
            raw = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ModelLoadFailed(f"Failed to parse config: {exc}") from exc
        return cls.from_dict(raw)
