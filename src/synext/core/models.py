"""
Core data models for synext.

This module contains the fundamental data structures used throughout
the extraction engine: configuration, tree nodes, warnings and results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple


class FileTypeSet:
    """
    Allow-list of file-type suffixes.

    Entries are normalized on the way in: surrounding whitespace removed,
    lower-cased and given a leading dot. The set only changes through
    add/remove/discard/toggle.
    """

    def __init__(self, suffixes: Optional[Iterable[str]] = None):
        self._suffixes = set()
        for suffix in suffixes or ():
            self.add(suffix)

    @staticmethod
    def normalize(suffix: str) -> str:
        """
        Normalize a suffix to its canonical form.

        Args:
            suffix: Suffix such as 'ts', '.TS' or ' .md '.

        Returns:
            Lower-cased suffix with a leading dot.

        Raises:
            ValueError: If the suffix is empty.
        """
        cleaned = str(suffix).strip().lower()
        if cleaned.startswith('.'):
            cleaned = cleaned[1:]
        if not cleaned:
            raise ValueError(f"Invalid file type: {suffix!r}")
        return '.' + cleaned

    def add(self, suffix: str) -> None:
        self._suffixes.add(self.normalize(suffix))

    def remove(self, suffix: str) -> None:
        self._suffixes.remove(self.normalize(suffix))

    def discard(self, suffix: str) -> None:
        self._suffixes.discard(self.normalize(suffix))

    def toggle(self, suffix: str) -> bool:
        """Add the suffix if absent, remove it if present. Returns True if now present."""
        normalized = self.normalize(suffix)
        if normalized in self._suffixes:
            self._suffixes.remove(normalized)
            return False
        self._suffixes.add(normalized)
        return True

    def copy(self) -> 'FileTypeSet':
        return FileTypeSet(self._suffixes)

    def to_list(self) -> List[str]:
        return sorted(self._suffixes)

    def __contains__(self, suffix: object) -> bool:
        if not isinstance(suffix, str):
            return False
        try:
            return self.normalize(suffix) in self._suffixes
        except ValueError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_list())

    def __len__(self) -> int:
        return len(self._suffixes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FileTypeSet):
            return self._suffixes == other._suffixes
        return NotImplemented

    def __repr__(self) -> str:
        return f"FileTypeSet({self.to_list()!r})"


class CompressionLevel(Enum):
    """Text transform tiers applied to file contents."""
    NONE = "none"
    LIGHT = "light"
    FULL = "full"

    @classmethod
    def parse(cls, value) -> 'CompressionLevel':
        """Parse a level from an enum member, its value or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for level in cls:
            if text in (level.value, level.name.lower()):
                return level
        raise ValueError(f"Unknown compression level: {value!r}")


class ExtractionMode(Enum):
    """What an extraction produces."""
    TREE_ONLY = "tree"
    FULL = "full"


class WarningKind(Enum):
    """Soft, non-fatal conditions recorded during an extraction."""
    UNREADABLE_ENTRY = "unreadable_entry"
    DECODE_FAILURE = "decode_failure"
    INVALID_ROOT = "invalid_root"
    DEPTH_LIMIT = "depth_limit"


class BudgetKind(Enum):
    """Which byte budget caused truncation."""
    TOTAL_BYTES = "max_total_bytes"
    FILE_BYTES = "max_file_bytes"


@dataclass(frozen=True)
class ExtractionWarning:
    """A soft warning attached to an extraction result."""
    kind: WarningKind
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class ExtractionConfig:
    """Per-invocation settings. Never mutated by the engine."""

    file_types: FileTypeSet = field(default_factory=FileTypeSet)
    compression_level: CompressionLevel = CompressionLevel.NONE
    max_file_bytes: int = 1024 * 1024  # 1MB per file
    max_total_bytes: int = 8 * 1024 * 1024  # 8MB per extraction
    max_depth: int = 64
    concurrency: int = 16

    def __post_init__(self):
        # Snapshot so later changes to the caller's set cannot leak in
        object.__setattr__(self, 'file_types', FileTypeSet(self.file_types))
        object.__setattr__(self, 'compression_level', CompressionLevel.parse(self.compression_level))
        for name in ('max_file_bytes', 'max_total_bytes', 'max_depth', 'concurrency'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


@dataclass(frozen=True)
class TreeNode:
    """A file or directory in an extraction tree."""

    absolute_path: str
    display_name: str
    is_directory: bool
    children: Tuple['TreeNode', ...] = ()
    included: bool = False
    size: int = 0

    @property
    def is_file(self) -> bool:
        return not self.is_directory

    def iter_included_files(self, prefix: str = "") -> Iterator[Tuple[str, 'TreeNode']]:
        """
        Yield (display_path, node) for every included file, in tree order.

        Display paths start at this node's display name and use '/' separators.
        """
        path = f"{prefix}/{self.display_name}" if prefix else self.display_name
        if self.is_file:
            if self.included:
                yield path, self
            return
        for child in self.children:
            yield from child.iter_included_files(path)


@dataclass(frozen=True)
class WalkResult:
    """Output of a tree walk."""

    roots: Tuple[TreeNode, ...]
    warnings: Tuple[ExtractionWarning, ...] = ()
    truncated: bool = False
    budgets_hit: FrozenSet[BudgetKind] = frozenset()

    def included_files(self) -> List[Tuple[str, TreeNode]]:
        """All included files across roots, in tree order."""
        files = []
        for root in self.roots:
            files.extend(root.iter_included_files())
        return files


@dataclass(frozen=True)
class TextCounts:
    """Character and approximate token counts for a piece of text."""
    char_count: int = 0
    token_count: int = 0


# Delimiter placed between tree text and content text when both are combined
TREE_CONTENT_DELIMITER = "\n\n"


@dataclass(frozen=True)
class ExtractionResult:
    """Result of a single extraction."""

    tree_text: str
    content_text: str = ""
    token_count: int = 0
    char_count: int = 0
    truncated: bool = False
    budgets_hit: FrozenSet[BudgetKind] = frozenset()
    warnings: Tuple[ExtractionWarning, ...] = ()
    no_matching_files: bool = False
    file_count: int = 0

    @property
    def combined_text(self) -> str:
        """Tree and contents as a single artifact, as placed on the clipboard."""
        if not self.content_text:
            return self.tree_text
        return f"{self.tree_text}{TREE_CONTENT_DELIMITER}{self.content_text}"

    def has_warnings(self) -> bool:
        """Check if any warnings were recorded."""
        return len(self.warnings) > 0

    def get_warning_summary(self) -> str:
        """Get a summary of all warnings."""
        if not self.warnings:
            return "No warnings."
        return f"{len(self.warnings)} warnings:\n" + "\n".join(f"- {w}" for w in self.warnings)
