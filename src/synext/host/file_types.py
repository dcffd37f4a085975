"""
Workspace file-type detection.

Scans a workspace once to find which suffixes are present, so the stored
allow-list can be seeded with types the user actually has.
"""

import logging
import os
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..core.models import FileTypeSet
from ..utils.file_filter import FilterPolicy
from .config_store import ConfigStore

# Stop scanning after this many files; large trees have seen every common suffix by then
MAX_SCANNED_FILES = 50000

logger = logging.getLogger(__name__)


def count_workspace_suffixes(root: Union[str, Path],
                             progress: Optional[Callable[[int], None]] = None) -> Dict[str, int]:
    """
    Count files per suffix under root.

    Ignored directories are not entered and ignored files are not counted.

    Args:
        root: Workspace directory.
        progress: Optional callback receiving the number of files seen so far.

    Returns:
        Mapping of lower-cased suffix to number of files.
    """
    counts: Counter = Counter()
    seen = 0

    def _on_error(error: OSError) -> None:
        logger.warning(f"Cannot scan {error.filename}: {error.strerror or error}")

    for current, dirs, files in os.walk(str(root), onerror=_on_error):
        dirs[:] = sorted(d for d in dirs if not FilterPolicy.is_ignored(d, True))
        for name in files:
            if FilterPolicy.is_ignored(name, False):
                continue
            suffix = Path(name).suffix.lower()
            if suffix:
                counts[suffix] += 1
            seen += 1
            if progress:
                progress(seen)
            if seen >= MAX_SCANNED_FILES:
                logger.info(f"Stopped file type scan of {root} after {seen:,} files")
                return dict(counts)

    return dict(counts)


def detect_workspace_file_types(root: Union[str, Path],
                                progress: Optional[Callable[[int], None]] = None) -> FileTypeSet:
    """Suffixes present in the workspace."""
    return FileTypeSet(count_workspace_suffixes(root, progress))


def initialize_file_types(store: ConfigStore, root: Union[str, Path], force: bool = False,
                          progress: Optional[Callable[[int], None]] = None) -> FileTypeSet:
    """
    Seed the store's file types from the workspace.

    Detection runs when forced, when no settings were ever saved, or when no
    file types are stored. Otherwise the stored set is returned untouched.
    """
    if not force and store.exists() and len(store.get_file_types()) > 0:
        logger.debug("Settings already exist, skipping file type initialization")
        return store.get_file_types()

    detected = detect_workspace_file_types(root, progress)
    logger.info(f"Detected {len(detected)} file types in {root}")
    return store.set_file_types(detected)
