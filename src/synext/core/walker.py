"""
Directory traversal for synext.

Walking happens in two phases. The scan phase lists directories
concurrently in worker threads, bounded by a semaphore, and remembers the
shallowest depth each real directory was reached at. The build phase is a
sequential depth-first pass over the listings that applies ordering, the
depth limit, symlink de-duplication, filtering and the byte budget, so the
resulting tree does not depend on scan timing.
"""

import asyncio
import logging
import os
import stat
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .exceptions import EmptySelectionError, ExtractionCancelled
from .models import (
    BudgetKind,
    ExtractionConfig,
    ExtractionWarning,
    TreeNode,
    WalkResult,
    WarningKind,
)
from ..utils.file_filter import FilterPolicy
from ..utils.path_utils import PathUtils


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    """A listed directory entry, independent of the path it was reached through."""
    name: str
    is_directory: bool
    real_path: str
    size: int = 0


@dataclass
class _WalkState:
    """Mutable bookkeeping for a single walk."""
    config: ExtractionConfig
    semaphore: asyncio.Semaphore
    listings: Dict[str, List[_Entry]] = field(default_factory=dict)
    scan_depths: Dict[str, int] = field(default_factory=dict)
    claimed: Set[str] = field(default_factory=set)
    warnings: List[ExtractionWarning] = field(default_factory=list)
    queued_bytes: int = 0
    budget_exhausted: bool = False
    budgets_hit: Set[BudgetKind] = field(default_factory=set)

    def warn(self, kind: WarningKind, path: str, message: str) -> None:
        logger.warning(f"{path}: {message}")
        self.warnings.append(ExtractionWarning(kind, path, message))


class TreeWalker:
    """Builds TreeNode trees from selected paths."""

    def __init__(self, cancel_event: Optional[threading.Event] = None):
        """
        Initialize the walker.

        Args:
            cancel_event: Optional event; once set, the walk stops listing
                          directories and raises ExtractionCancelled.
        """
        self.cancel_event = cancel_event

    async def walk(self, root_paths: Sequence[str], config: ExtractionConfig) -> WalkResult:
        """
        Walk the selected paths into one tree per valid root.

        Args:
            root_paths: Files and directories selected by the user.
            config: Extraction settings.

        Returns:
            WalkResult with roots, warnings and truncation details.

        Raises:
            EmptySelectionError: If no root path exists.
            ExtractionCancelled: If the cancel event was set.
        """
        state = _WalkState(config=config, semaphore=asyncio.Semaphore(config.concurrency))

        roots: List[Tuple[str, _Entry]] = []
        for raw_path in root_paths:
            root = await self._resolve_root(str(raw_path), state)
            if root is not None:
                roots.append(root)

        if not roots:
            raise EmptySelectionError(root_paths)

        await asyncio.gather(*(
            self._scan(entry.real_path, 0, state)
            for _, entry in roots
            if entry.is_directory and not FilterPolicy.is_ignored(entry.name, True)
        ))

        nodes = []
        for path, entry in roots:
            self._check_cancelled()
            if entry.real_path in state.claimed:
                logger.debug(f"Skipping duplicate selection: {path}")
                continue
            state.claimed.add(entry.real_path)
            nodes.append(self._build(path, entry, state, is_root=True))

        return WalkResult(
            roots=tuple(nodes),
            warnings=tuple(sorted(state.warnings, key=lambda w: (w.path, w.kind.value))),
            truncated=bool(state.budgets_hit),
            budgets_hit=frozenset(state.budgets_hit),
        )

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ExtractionCancelled("Extraction cancelled")

    async def _resolve_root(self, raw_path: str, state: _WalkState) -> Optional[Tuple[str, _Entry]]:
        path = PathUtils.expand(raw_path)
        try:
            st = await asyncio.to_thread(os.stat, path)
            real_path = await asyncio.to_thread(os.path.realpath, path)
        except OSError as e:
            state.warn(WarningKind.INVALID_ROOT, raw_path, f"Cannot access selection: {e.strerror or e}")
            return None

        if not (stat.S_ISDIR(st.st_mode) or stat.S_ISREG(st.st_mode)):
            state.warn(WarningKind.INVALID_ROOT, raw_path, "Not a regular file or directory")
            return None

        is_directory = stat.S_ISDIR(st.st_mode)
        entry = _Entry(
            name=PathUtils.display_name(path),
            is_directory=is_directory,
            real_path=real_path,
            size=0 if is_directory else st.st_size,
        )
        return path, entry

    async def _scan(self, real_path: str, depth: int, state: _WalkState) -> None:
        """
        List a directory and, concurrently, its subdirectories.

        A directory reached again through a shallower path is revisited so
        that its subdirectories are scanned with the smaller depth.
        """
        known = state.scan_depths.get(real_path)
        if known is not None and known <= depth:
            return
        state.scan_depths[real_path] = depth

        if depth >= state.config.max_depth:
            return

        entries = state.listings.get(real_path)
        if entries is None:
            self._check_cancelled()
            async with state.semaphore:
                self._check_cancelled()
                try:
                    entries, problems = await asyncio.to_thread(self._list_directory, real_path)
                except OSError as e:
                    if real_path not in state.listings:
                        state.listings[real_path] = []
                        state.warn(WarningKind.UNREADABLE_ENTRY, real_path,
                                   f"Cannot list directory: {e.strerror or e}")
                    return

            if real_path not in state.listings:
                for path, message in problems:
                    state.warn(WarningKind.UNREADABLE_ENTRY, path, message)
                state.listings[real_path] = entries

        await asyncio.gather(*(
            self._scan(entry.real_path, depth + 1, state)
            for entry in entries
            if entry.is_directory
        ))

    @staticmethod
    def _list_directory(path: str) -> Tuple[List[_Entry], List[Tuple[str, str]]]:
        """
        Blocking directory listing, run in a worker thread.

        Ignored entries are dropped here so their subtrees are never entered.
        Symlinks are followed.
        """
        entries = []
        problems = []
        with os.scandir(path) as iterator:
            for item in iterator:
                try:
                    is_directory = item.is_dir()
                    if FilterPolicy.is_ignored(item.name, is_directory):
                        continue
                    if is_directory:
                        size = 0
                    elif item.is_file():
                        size = item.stat().st_size
                    else:
                        # Broken symlinks, sockets, FIFOs
                        if item.is_symlink() and not os.path.exists(item.path):
                            problems.append((item.path, "Broken symbolic link"))
                        continue
                    real_path = os.path.realpath(item.path)
                except OSError as e:
                    problems.append((item.path, f"Cannot read entry: {e.strerror or e}"))
                    continue
                entries.append(_Entry(item.name, is_directory, real_path, size))
        return entries, problems

    @staticmethod
    def _sort_key(entry: _Entry):
        return (not entry.is_directory, entry.name.lower(), entry.name)

    def _build(self, path: str, entry: _Entry, state: _WalkState, depth: int = 0,
               is_root: bool = False) -> Optional[TreeNode]:
        """
        Build the node for an entry whose real path is already claimed.

        Directories at max_depth are left out with a warning and stay
        unclaimed, so a shallower path to them can still descend.

        Returns None for non-root directories without included descendants.
        """
        if not entry.is_directory:
            return TreeNode(
                absolute_path=path,
                display_name=entry.name,
                is_directory=False,
                included=self._admit_file(path, entry, state),
                size=entry.size,
            )

        self._check_cancelled()
        children = []
        for child in sorted(state.listings.get(entry.real_path, ()), key=self._sort_key):
            child_path = os.path.join(path, child.name)
            if child.real_path in state.claimed:
                logger.debug(f"Skipping already visited path: {child_path}")
                continue
            if child.is_directory and depth + 1 >= state.config.max_depth:
                state.warn(WarningKind.DEPTH_LIMIT, child_path,
                           f"Not descended: depth limit {state.config.max_depth} reached")
                continue
            state.claimed.add(child.real_path)
            node = self._build(child_path, child, state, depth + 1)
            if node is not None:
                children.append(node)

        included = any(child.included for child in children)
        if not included and not is_root:
            return None

        return TreeNode(
            absolute_path=path,
            display_name=entry.name,
            is_directory=True,
            children=tuple(children),
            included=included,
        )

    @staticmethod
    def _admit_file(path: str, entry: _Entry, state: _WalkState) -> bool:
        """Apply the filter and the total byte budget to a file."""
        config = state.config
        if not FilterPolicy.should_include(path, False, config):
            return False

        if state.budget_exhausted:
            return False

        cost = min(entry.size, config.max_file_bytes)
        if state.queued_bytes + cost > config.max_total_bytes:
            logger.info(f"Byte budget of {config.max_total_bytes:,} reached at {path}")
            state.budget_exhausted = True
            state.budgets_hit.add(BudgetKind.TOTAL_BYTES)
            return False

        state.queued_bytes += cost
        return True
