"""
Byte-to-text decoding for file contents.

Decoding tries a byte order mark first, then rejects content that looks
binary, then walks a short list of fallback encodings. Reads that were cut
at the per-file byte cap are decoded incrementally so a multi-byte
character split at the cut does not turn a text file into a failure.
"""

import codecs
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


# latin-1 decodes any byte sequence, so it is left out: it would hide binary content
DEFAULT_ENCODINGS = ('utf-8', 'cp1252')

# UTF-32 marks go first; the UTF-32-LE mark starts with the UTF-16-LE one
BYTE_ORDER_MARKS = (
    (codecs.BOM_UTF32_LE, 'utf-32-le'),
    (codecs.BOM_UTF32_BE, 'utf-32-be'),
    (codecs.BOM_UTF8, 'utf-8'),
    (codecs.BOM_UTF16_LE, 'utf-16-le'),
    (codecs.BOM_UTF16_BE, 'utf-16-be'),
)

BINARY_SAMPLE_BYTES = 8192
CONTROL_CHAR_RATIO = 0.3
TEXT_CONTROL_BYTES = frozenset({9, 10, 12, 13})  # tab, LF, FF, CR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedText:
    """Outcome of decoding one file's bytes."""
    text: Optional[str]
    encoding: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.text is not None


class EncodingDetector:
    """Decodes file bytes with BOM sniffing, a binary check and fallbacks."""

    def __init__(self, fallback_encodings: Optional[Sequence[str]] = None):
        self.encodings = tuple(fallback_encodings or DEFAULT_ENCODINGS)

    def decode(self, content: bytes, source: Optional[str] = None, partial: bool = False) -> DecodedText:
        """
        Decode raw file bytes.

        Args:
            content: Bytes read from the file.
            source: Path used in log messages.
            partial: The bytes stop at an arbitrary offset; an incomplete
                trailing character is dropped instead of failing.

        Returns:
            DecodedText; text is None when the bytes are binary or no
            encoding fits.
        """
        bom, encoding = self.sniff_bom(content)
        if bom:
            try:
                text = self._decode(content[len(bom):], encoding, partial)
                logger.debug(f"{source}: decoded as {encoding} (byte order mark)")
                return DecodedText(text, encoding)
            except UnicodeDecodeError as e:
                logger.debug(f"{source}: byte order mark says {encoding} but decoding failed: {e}")

        if self.is_likely_binary(content):
            return DecodedText(None, error="Binary content")

        failed_at = None
        for encoding in self.encodings:
            try:
                text = self._decode(content, encoding, partial)
            except UnicodeDecodeError as e:
                failed_at = e.start if failed_at is None else failed_at
                continue
            except LookupError:
                logger.warning(f"Skipping unknown encoding {encoding!r}")
                continue
            logger.debug(f"{source}: decoded as {encoding}")
            return DecodedText(text, encoding)

        error = f"Not decodable as {', '.join(self.encodings)}"
        if failed_at is not None:
            error += f" (first bad byte at offset {failed_at})"
        logger.info(f"{source}: {error}")
        return DecodedText(None, error=error)

    @staticmethod
    def _decode(content: bytes, encoding: str, partial: bool) -> str:
        if not partial:
            return content.decode(encoding)
        return codecs.getincrementaldecoder(encoding)().decode(content, final=False)

    @staticmethod
    def sniff_bom(content: bytes) -> Tuple[bytes, Optional[str]]:
        """Return (mark, encoding) for a leading byte order mark, or (b'', None)."""
        for bom, encoding in BYTE_ORDER_MARKS:
            if content.startswith(bom):
                return bom, encoding
        return b'', None

    @staticmethod
    def is_likely_binary(content: bytes) -> bool:
        """
        Guess whether bytes are binary from a leading sample.

        NUL bytes mean binary. Otherwise the sample is text if it is valid
        UTF-8, or if control characters make up less than a third of it.
        """
        sample = content[:BINARY_SAMPLE_BYTES]
        if not sample:
            return False
        if b'\x00' in sample:
            return True

        try:
            codecs.getincrementaldecoder('utf-8')().decode(sample, final=False)
            return False
        except UnicodeDecodeError:
            pass

        control = sum(1 for byte in sample if byte < 32 and byte not in TEXT_CONTROL_BYTES)
        return control > len(sample) * CONTROL_CHAR_RATIO
