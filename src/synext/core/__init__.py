"""Core components for synext."""

from .models import (
    BudgetKind,
    CompressionLevel,
    ExtractionConfig,
    ExtractionMode,
    ExtractionResult,
    ExtractionWarning,
    FileTypeSet,
    TextCounts,
    TreeNode,
    WalkResult,
    WarningKind,
)
from .exceptions import EmptySelectionError, ExtractionCancelled, SynextError
from .compression import compress
from .tokenizer import TokenCounter, count

__all__ = [
    "BudgetKind",
    "CompressionLevel",
    "ExtractionConfig",
    "ExtractionMode",
    "ExtractionResult",
    "ExtractionWarning",
    "FileTypeSet",
    "TextCounts",
    "TreeNode",
    "WalkResult",
    "WarningKind",
    "EmptySelectionError",
    "ExtractionCancelled",
    "SynextError",
    "compress",
    "TokenCounter",
    "count",
]
