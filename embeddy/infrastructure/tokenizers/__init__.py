from .hf_tokenizer import HFTokenizer

__all__ = ["HFTokenizer"]
