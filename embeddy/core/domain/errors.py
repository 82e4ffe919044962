"""
Error taxonomy shared by every layer.

Each error renders as ``"<prefix>: <message>"`` so CLI output and API
envelopes read the same.
"""


class EmbeddyError(RuntimeError):
    prefix = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class ModelNotFound(EmbeddyError):
    """The identifier is not in the model registry."""

    prefix = "Model not found"


class ModelLoadFailed(EmbeddyError):
    """Config, weights or tokenizer of a model could not be loaded."""

    prefix = "Failed to load model"


class InvalidInput(EmbeddyError):
    prefix = "Invalid input"


class DownloadFailed(EmbeddyError):
    prefix = "Download failed"


class ConfigError(EmbeddyError):
    prefix = "Configuration error"


class EmbeddingError(EmbeddyError):
    """Tokenization or pooling failed on an otherwise loaded model."""

    prefix = "Embedding error"
