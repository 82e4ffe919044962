"""
File: embeddy/infrastructure/weights/converter.py
One-shot conversion of ``pytorch_model.bin`` into ``model.safetensors``.

After a successful conversion the legacy file is deleted, so a model
directory holds at most one of the two encodings.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Optional

import torch
from safetensors.torch import save_file

from embeddy.core.domain.errors import ModelLoadFailed

__all__ = [
    "SAFETENSORS_FILE",
    "LEGACY_FILE",
    "ensure_safetensors",
    "load_legacy_tensors",
    "write_safetensors",
]

logger = logging.getLogger(__name__)

SAFETENSORS_FILE = "model.safetensors"
LEGACY_FILE = "pytorch_model.bin"


def load_legacy_tensors(path: Path) -> Dict[str, torch.Tensor]:
    """Read every tensor of a pickled checkpoint into CPU memory.

    Accepts a flat ``name -> tensor`` mapping or a ``{"state_dict": ...}``
    wrapper. Each tensor is copied into its own contiguous storage so tied
    weights can be written out independently.
    """
    try:
        payload = torch.load(path, map_location="cpu", weights_only=True)
    except Exception as exc:  # torch.load has no single error type
        raise ModelLoadFailed(f"Failed to read PyTorch file: {exc}") from exc

    if isinstance(payload, Mapping) and isinstance(payload.get("state_dict"), Mapping):
        payload = payload["state_dict"]
    if not isinstance(payload, Mapping):
        raise ModelLoadFailed(
            f"Failed to read PyTorch file: expected a mapping of tensors, got {type(payload).__name__}"
        )

    tensors: Dict[str, torch.Tensor] = {}
    for name, value in payload.items():
        if not isinstance(value, torch.Tensor):
            logger.debug(f"Skipping non-tensor entry '{name}' ({type(value).__name__})")
            continue
        tensors[str(name)] = value.detach().contiguous().clone()

    if not tensors:
        raise ModelLoadFailed(f"Failed to read PyTorch file: no tensors in {path}")
    return tensors


def write_safetensors(tensors: Mapping[str, torch.Tensor], target: Path) -> None:
    """Write ``tensors`` to ``target`` atomically: either the complete file
    appears under ``target`` or nothing does."""
    target = Path(target)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        save_file(dict(tensors), str(tmp_path))
        os.replace(tmp_path, target)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise ModelLoadFailed(f"Failed to save SafeTensors: {exc}") from exc


def ensure_safetensors(model_dir: Path) -> Optional[Path]:
    """Make sure ``model_dir`` has a ``model.safetensors``.

    Returns the safetensors path, or ``None`` when the directory has no
    weight file at all (loading will fail later with a clearer message).
    """
    model_dir = Path(model_dir)
    safetensors_file = model_dir / SAFETENSORS_FILE
    legacy_file = model_dir / LEGACY_FILE

    if safetensors_file.exists():
        return safetensors_file
    if not legacy_file.exists():
        return None

    logger.info(f"Converting {LEGACY_FILE} to {SAFETENSORS_FILE} in {model_dir}...")
    tensors = load_legacy_tensors(legacy_file)
    logger.info(f"Loading {len(tensors)} tensors from PyTorch model")

    write_safetensors(tensors, safetensors_file)
    logger.info(f"Converted to SafeTensors format: {safetensors_file}")

    # safetensors file is authoritative from here on
    try:
        legacy_file.unlink()
    except OSError as exc:
        logger.warning(f"Could not remove {legacy_file}: {exc}")
    else:
        logger.info(f"Removed {LEGACY_FILE} to save space")

    return safetensors_file
