"""
Utils: light helpers shared by the CLI and the server.
"""

import torch

from embeddy.core.domain.errors import ConfigError, InvalidInput

__all__ = ["parse_device"]


def parse_device(device_str: str) -> torch.device:
    """
    Turn a device string into a torch device:
    1. ``cpu``
    2. ``cuda`` / ``cuda:<ordinal>`` (must be available on this host)
    """
    value = device_str.strip().lower()
    if value == "cpu":
        return torch.device("cpu")

    if value.startswith("cuda"):
        _, sep, ordinal_str = value.partition(":")
        if value != "cuda" and not sep:
            raise InvalidInput(f"Unknown device: {device_str}")
        try:
            ordinal = int(ordinal_str) if ordinal_str else 0
        except ValueError as exc:
            raise InvalidInput(f"Invalid CUDA device: {device_str}") from exc
        if ordinal < 0:
            raise InvalidInput(f"Invalid CUDA device: {device_str}")
        if not torch.cuda.is_available() or ordinal >= torch.cuda.device_count():
            raise ConfigError(f"Failed to initialize CUDA device: {device_str}")
        return torch.device("cuda", ordinal)

    raise InvalidInput(f"Unknown device: {device_str}")
