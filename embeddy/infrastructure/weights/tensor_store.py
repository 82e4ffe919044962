"""
File: embeddy/infrastructure/weights/tensor_store.py
Read-only, memory-mapped access to safetensors checkpoints.

The header (8-byte little-endian length + JSON table) is parsed directly so
tensor names, dtypes and shapes can be listed without decoding any values.
Values are decoded on demand through ``safetensors.safe_open``, whose handles
the store owns until :meth:`TensorStore.close`.
"""

from __future__ import annotations

import contextlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence

import torch
from safetensors import SafetensorError, safe_open

from embeddy.core.domain.entities import TensorDescriptor
from embeddy.core.domain.errors import ModelLoadFailed

__all__ = ["TensorStore", "read_header"]

logger = logging.getLogger(__name__)

HEADER_LEN_BYTES = 8
MAX_HEADER_BYTES = 100_000_000  # same ceiling the safetensors reader enforces


def read_header(path: Path) -> List[TensorDescriptor]:
    """Parse the tensor table of a safetensors file, in file order.

    Raises:
        ModelLoadFailed: missing file, truncated or malformed header, or a
            tensor extent that falls outside the data region.
    """
    path = Path(path)
    try:
        file_size = path.stat().st_size
        with path.open("rb") as handle:
            header_len_raw = handle.read(HEADER_LEN_BYTES)
            if len(header_len_raw) != HEADER_LEN_BYTES:
                raise ModelLoadFailed(f"Invalid safetensors header in {path}")
            header_len = int.from_bytes(header_len_raw, "little")
            if header_len > MAX_HEADER_BYTES or header_len > file_size - HEADER_LEN_BYTES:
                raise ModelLoadFailed(f"Incomplete safetensors header in {path}")
            header_bytes = handle.read(header_len)
    except OSError as exc:
        raise ModelLoadFailed(f"Failed to load safetensors: {exc}") from exc

    try:
        header = json.loads(header_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ModelLoadFailed(f"Unable to parse safetensors header in {path}") from exc
    if not isinstance(header, dict):
        raise ModelLoadFailed(f"Safetensors header in {path} must be a JSON object")

    data_len = file_size - HEADER_LEN_BYTES - header_len
    descriptors: List[TensorDescriptor] = []
    for name, entry in header.items():
        if name == "__metadata__":
            continue
        descriptors.append(_parse_entry(path, name, entry, data_len))
    return descriptors


def _parse_entry(path: Path, name: str, entry: Any, data_len: int) -> TensorDescriptor:
    if not isinstance(entry, dict) or not {"dtype", "shape", "data_offsets"} <= set(entry):
        raise ModelLoadFailed(f"Malformed entry for tensor '{name}' in {path}")
    try:
        shape = tuple(int(dim) for dim in entry["shape"])
        start, end = (int(offset) for offset in entry["data_offsets"])
    except (TypeError, ValueError) as exc:
        raise ModelLoadFailed(f"Malformed entry for tensor '{name}' in {path}") from exc
    if not 0 <= start <= end <= data_len:
        raise ModelLoadFailed(
            f"Tensor '{name}' extent {start}..{end} exceeds data region of {data_len} bytes"
        )
    return TensorDescriptor(
        name=name,
        dtype=str(entry["dtype"]),
        shape=shape,
        data_offsets=(start, end),
        path=path,
    )


class TensorStore:
    """Lazy tensor lookup over one or more safetensors files.

    Tensor names must be unique across files. Use as a context manager or
    call :meth:`close` when the store is no longer needed.
    """

    def __init__(self, paths: Path | str | Sequence[Path | str], device: Any = "cpu"):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self.paths = [Path(p) for p in paths]
        self.device = str(device)
        self._descriptors: Dict[str, TensorDescriptor] = {}
        self._handles: Dict[Path, Any] = {}
        self._stack = contextlib.ExitStack()
        self._closed = False

        try:
            for path in self.paths:
                self._open(path)
        except BaseException:
            self._stack.close()
            raise
        logger.debug(
            f"Opened {len(self._descriptors)} tensors from {len(self.paths)} file(s) on {self.device}"
        )

    def _open(self, path: Path) -> None:
        if not path.is_file():
            raise ModelLoadFailed(f"Weight file not found: {path}")
        for descriptor in read_header(path):
            if descriptor.name in self._descriptors:
                raise ModelLoadFailed(
                    f"Duplicate tensor '{descriptor.name}' in {path} "
                    f"(already in {self._descriptors[descriptor.name].path})"
                )
            self._descriptors[descriptor.name] = descriptor
        try:
            handle = self._stack.enter_context(
                safe_open(str(path), framework="pt", device=self.device)
            )
        except (SafetensorError, OSError, RuntimeError, ValueError) as exc:
            raise ModelLoadFailed(f"Failed to load safetensors: {exc}") from exc
        self._handles[path] = handle

    # ------------------------------------------------------------------ #
    def descriptors(self) -> List[TensorDescriptor]:
        return list(self._descriptors.values())

    def names(self) -> List[str]:
        return list(self._descriptors)

    def descriptor(self, name: str) -> TensorDescriptor:
        try:
            return self._descriptors[name]
        except KeyError:
            raise ModelLoadFailed(f"Tensor '{name}' not found in weight files") from None

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def load(self, name: str) -> torch.Tensor:
        """Decode tensor ``name`` onto the store's device."""
        descriptor = self.descriptor(name)
        if self._closed:
            raise ModelLoadFailed("Tensor store is closed")
        try:
            return self._handles[descriptor.path].get_tensor(name)
        except (SafetensorError, RuntimeError, ValueError) as exc:
            raise ModelLoadFailed(f"Failed to load tensor '{name}': {exc}") from exc

    # ------------------------------------------------------------------ #
    def close(self) -> None:
        if not self._closed:
            self._stack.close()
            self._handles.clear()
            self._closed = True

    def __enter__(self) -> "TensorStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False
