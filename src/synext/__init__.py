"""
synext - turn a selection of files and folders into a single prompt-ready
text artifact: a directory tree plus concatenated, optionally compressed
file contents, with character and token counts.
"""

__version__ = "0.3.0"

from .core.extractor import ExtractionCoordinator
from .core.models import (
    CompressionLevel,
    ExtractionConfig,
    ExtractionMode,
    ExtractionResult,
    FileTypeSet,
)
from .core.exceptions import EmptySelectionError, ExtractionCancelled
from .core.tokenizer import count

__all__ = [
    "ExtractionCoordinator",
    "CompressionLevel",
    "ExtractionConfig",
    "ExtractionMode",
    "ExtractionResult",
    "FileTypeSet",
    "EmptySelectionError",
    "ExtractionCancelled",
    "count",
]
