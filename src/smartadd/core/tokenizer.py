"""
Token counting functionality for smartadd.

Used to estimate how large a completion request is before it is sent,
using OpenAI's tiktoken library with a character-based fallback.
"""

import logging
from typing import Any, Optional

import tiktoken


class TokenCounter:
    """
    Handles token counting for prompt text.

    Falls back to a rough estimate when the encoding cannot be loaded
    (tiktoken downloads encodings on first use, which can fail offline).
    """

    def __init__(self, encoding_name: str = "cl100k_base"):
        """
        Initialize the token counter.

        Args:
            encoding_name: The name of the tiktoken encoding to use.
                         Default is cl100k_base (used by GPT-4).
        """
        self.encoding_name = encoding_name
        self.encoder: Optional[Any] = None

        try:
            self.encoder = tiktoken.get_encoding(encoding_name)
        except Exception as e:
            logging.warning(f"Failed to initialize token encoder '{encoding_name}': {e}")

    @property
    def is_available(self) -> bool:
        """Check if exact token counting is available."""
        return self.encoder is not None

    def count(self, text: str) -> int:
        """
        Count tokens in the given text.

        Returns an estimate when the encoder is unavailable.
        """
        if not text:
            return 0
        if not self.is_available:
            return self.estimate_tokens(text)

        try:
            return len(self.encoder.encode(text, disallowed_special=()))
        except Exception as e:
            logging.debug(f"Error counting tokens: {e}")
            return self.estimate_tokens(text)

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """
        Estimate token count without tiktoken.

        Rough estimation: ~4 characters per token on average, blended with
        a word-based estimate.
        """
        if not text:
            return 0

        char_estimate = len(text) / 4
        word_estimate = len(text.split()) * 1.3

        return int((char_estimate + word_estimate) / 2)
