"""
Content aggregation for synext.

Reads included files concurrently, decodes and compresses them, and joins
them into path-labelled sections in tree order.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence, Tuple

from .compression import compress
from .exceptions import ExtractionCancelled
from .models import BudgetKind, ExtractionConfig, ExtractionWarning, TreeNode, WarningKind
from ..utils.encodings import EncodingDetector


SECTION_HEADER = "--- {path} ---"
BINARY_MARKER = "[binary file skipped]"
UNREADABLE_MARKER = "[unreadable file skipped: {reason}]"
TRUNCATION_MARKER = "... [truncated: showing {shown:,} of {total:,} bytes]"

logger = logging.getLogger(__name__)


@dataclass
class FileSection:
    """Result of reading one file."""
    path: str
    body: str
    truncated: bool = False
    warning: Optional[ExtractionWarning] = None

    def render(self) -> str:
        header = SECTION_HEADER.format(path=self.path)
        if self.body:
            return f"{header}\n{self.body}\n"
        return f"{header}\n"


@dataclass(frozen=True)
class AggregateResult:
    """Concatenated sections plus what went wrong along the way."""
    text: str
    warnings: Tuple[ExtractionWarning, ...] = ()
    budgets_hit: FrozenSet[BudgetKind] = field(default_factory=frozenset)

    @property
    def truncated(self) -> bool:
        return bool(self.budgets_hit)


class ContentAggregator:
    """Builds the content part of an extraction."""

    def __init__(self, cancel_event: Optional[threading.Event] = None,
                 detector: Optional[EncodingDetector] = None):
        self.cancel_event = cancel_event
        self.detector = detector or EncodingDetector()

    async def aggregate(self, included_files: Sequence[Tuple[str, TreeNode]],
                        config: ExtractionConfig) -> AggregateResult:
        """
        Read, compress and concatenate files.

        Args:
            included_files: (display_path, node) pairs in tree order.
            config: Extraction settings.

        Returns:
            AggregateResult with the joined sections.

        Raises:
            ExtractionCancelled: If the cancel event was set.
        """
        semaphore = asyncio.Semaphore(config.concurrency)
        tasks = [self._read_section(path, node, config, semaphore) for path, node in included_files]
        sections: List[FileSection] = await asyncio.gather(*tasks)

        warnings = tuple(s.warning for s in sections if s.warning is not None)
        budgets = frozenset({BudgetKind.FILE_BYTES}) if any(s.truncated for s in sections) else frozenset()
        text = "\n".join(section.render() for section in sections)
        return AggregateResult(text=text, warnings=warnings, budgets_hit=budgets)

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ExtractionCancelled("Extraction cancelled")

    async def _read_section(self, display_path: str, node: TreeNode, config: ExtractionConfig,
                            semaphore: asyncio.Semaphore) -> FileSection:
        self._check_cancelled()
        async with semaphore:
            self._check_cancelled()
            return await asyncio.to_thread(self.read_section, display_path, node.absolute_path, config)

    def read_section(self, display_path: str, file_path: str, config: ExtractionConfig) -> FileSection:
        """
        Read and transform a single file. Blocking; runs in a worker thread.

        Never raises for I/O or decoding problems; those become markers plus
        a warning on the returned section.
        """
        limit = config.max_file_bytes
        try:
            with open(file_path, 'rb') as f:
                raw = f.read(limit + 1)
                truncated = len(raw) > limit
                total_size = len(raw)
                if truncated:
                    raw = raw[:limit]
                    f.seek(0, 2)
                    total_size = f.tell()
        except OSError as e:
            reason = e.strerror or str(e)
            logger.warning(f"Cannot read {file_path}: {reason}")
            return FileSection(
                path=display_path,
                body=UNREADABLE_MARKER.format(reason=reason),
                warning=ExtractionWarning(WarningKind.UNREADABLE_ENTRY, file_path, f"Cannot read file: {reason}"),
            )

        decoded = self.detector.decode(raw, file_path, partial=truncated)
        if not decoded.ok:
            logger.info(f"Skipping non-text file {file_path}: {decoded.error}")
            return FileSection(
                path=display_path,
                body=BINARY_MARKER,
                warning=ExtractionWarning(WarningKind.DECODE_FAILURE, file_path, decoded.error or "Binary content"),
            )

        body = compress(decoded.text, config.compression_level, Path(file_path).suffix)
        if truncated:
            marker = TRUNCATION_MARKER.format(shown=limit, total=total_size)
            body = f"{body}\n{marker}" if body else marker
            logger.info(f"Truncated {file_path} to {limit:,} bytes")
        return FileSection(path=display_path, body=body, truncated=truncated)
