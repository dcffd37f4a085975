"""
Token counting functionality for synext.

The default count is an approximation: text is segmented into runs of word
characters and single punctuation characters. A word run of n characters
counts as ceil(n / 4) tokens, every other non-whitespace character counts as
one token, whitespace counts as nothing. The count is deterministic, zero for
empty text, and never decreases when text is appended.

An exact count for a specific model family is available by naming a
tiktoken encoding. Exact BPE counts can shift when a token boundary moves,
so the monotonic guarantee applies to the approximate count only.
"""

import logging
import math
import re
from typing import Any, Dict, Optional

import tiktoken

from .models import TextCounts


SEGMENT_PATTERN = re.compile(r'(\w+)|[^\w\s]')
CHARS_PER_TOKEN = 4

logger = logging.getLogger(__name__)


class TokenCounter:
    """
    Handles token counting for text content.

    Without an encoding name the counter uses the approximate segmentation
    described in the module docstring. With one, it counts with tiktoken and
    falls back to the approximation if the encoder cannot be loaded.
    """

    def __init__(self, encoding_name: Optional[str] = None):
        """
        Initialize the token counter.

        Args:
            encoding_name: Optional tiktoken encoding (e.g. "cl100k_base").
                           None selects the approximate count.
        """
        self.encoding_name = encoding_name
        self.encoder: Optional[Any] = None

        if encoding_name:
            try:
                self.encoder = tiktoken.get_encoding(encoding_name)
            except Exception as e:
                logger.warning(f"Failed to initialize token encoder '{encoding_name}': {e}")

    @property
    def is_exact(self) -> bool:
        """Check if counts come from a real tokenizer."""
        return self.encoder is not None

    def count(self, text: str) -> int:
        """
        Count tokens in the given text.

        Args:
            text: The text to count tokens for.

        Returns:
            Number of tokens; 0 for empty text.
        """
        if not text:
            return 0

        if self.encoder is not None:
            try:
                return len(self.encoder.encode(text, disallowed_special=()))
            except ValueError as e:
                logger.debug(f"Error counting tokens, using estimate: {e}")

        return self.estimate_tokens(text)

    def count_batch(self, texts: Dict[str, str]) -> Dict[str, int]:
        """
        Count tokens for multiple texts.

        Args:
            texts: Dictionary mapping identifiers to text content.

        Returns:
            Dictionary mapping identifiers to token counts.
        """
        return {key: self.count(text) for key, text in texts.items()}

    def measure(self, text: str) -> TextCounts:
        """Character and token counts for text."""
        return TextCounts(char_count=len(text), token_count=self.count(text))

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """
        Approximate token count from whitespace and punctuation segmentation.

        Args:
            text: The text to estimate tokens for.

        Returns:
            Estimated number of tokens.
        """
        if not text:
            return 0

        total = 0
        for match in SEGMENT_PATTERN.finditer(text):
            word = match.group(1)
            if word:
                total += math.ceil(len(word) / CHARS_PER_TOKEN)
            else:
                total += 1
        return total


_default_counter = TokenCounter()


def count(text: str) -> TextCounts:
    """
    Count characters and approximate tokens.

    char_count is the number of Unicode code points, not bytes.
    """
    return _default_counter.measure(text)
