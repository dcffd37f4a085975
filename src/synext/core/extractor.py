"""Extraction orchestrator."""

import asyncio
import logging
import threading
from typing import Callable, Optional, Sequence

from .aggregator import AggregateResult, ContentAggregator
from .models import (
    TREE_CONTENT_DELIMITER,
    ExtractionConfig,
    ExtractionMode,
    ExtractionResult,
)
from .tokenizer import TokenCounter
from .walker import TreeWalker
from ..utils.tree_renderer import TreeRenderer


logger = logging.getLogger(__name__)


class ExtractionCoordinator:
    """Runs walker, renderer, aggregator and counter for one extraction at a time."""

    def __init__(self, token_counter: Optional[TokenCounter] = None):
        """
        Initialize the coordinator.

        Args:
            token_counter: Counter used for result counts. Defaults to the
                           approximate counter.
        """
        self.token_counter = token_counter or TokenCounter()

    def extract(self, root_paths: Sequence[str], config: ExtractionConfig,
                mode: ExtractionMode = ExtractionMode.FULL,
                cancel_event: Optional[threading.Event] = None) -> ExtractionResult:
        """
        Extract the selected paths. Blocks until done.

        Args:
            root_paths: Files and directories selected by the user.
            config: Extraction settings; not modified.
            mode: TREE_ONLY renders structure only, FULL adds file contents.
            cancel_event: Optional event that cancels the extraction when set.

        Returns:
            ExtractionResult for the selection.

        Raises:
            EmptySelectionError: If no selected path exists.
            ExtractionCancelled: If cancel_event was set before completion.
        """
        return asyncio.run(self.extract_async(root_paths, config, mode, cancel_event))

    async def extract_async(self, root_paths: Sequence[str], config: ExtractionConfig,
                            mode: ExtractionMode = ExtractionMode.FULL,
                            cancel_event: Optional[threading.Event] = None) -> ExtractionResult:
        """Async variant of extract(); cancelling the awaiting task discards all work."""
        walk = await TreeWalker(cancel_event).walk(root_paths, config)
        included = walk.included_files()

        if mode is ExtractionMode.FULL and included:
            aggregator = ContentAggregator(cancel_event)
            tree_text, aggregate = await asyncio.gather(
                asyncio.to_thread(TreeRenderer.render, walk.roots),
                aggregator.aggregate(included, config),
            )
        else:
            tree_text = TreeRenderer.render(walk.roots)
            aggregate = AggregateResult(text="")

        if not included:
            logger.info("No files matched the selected file types")

        content_text = aggregate.text
        counted = f"{tree_text}{TREE_CONTENT_DELIMITER}{content_text}" if content_text else tree_text
        counts = self.token_counter.measure(counted)
        budgets = walk.budgets_hit | aggregate.budgets_hit

        result = ExtractionResult(
            tree_text=tree_text,
            content_text=content_text,
            token_count=counts.token_count,
            char_count=counts.char_count,
            truncated=bool(budgets),
            budgets_hit=budgets,
            warnings=walk.warnings + aggregate.warnings,
            no_matching_files=not included,
            file_count=len(included),
        )
        logger.debug(f"Extracted {result.file_count} files, {result.token_count:,} tokens, "
                     f"{result.char_count:,} chars")
        return result

    def extract_and_copy(self, root_paths: Sequence[str], config: ExtractionConfig,
                         copy: Callable[[str], None],
                         mode: ExtractionMode = ExtractionMode.FULL,
                         cancel_event: Optional[threading.Event] = None) -> ExtractionResult:
        """
        Extract and hand the combined text to a clipboard writer.

        The writer is only called with a complete result.
        """
        result = self.extract(root_paths, config, mode, cancel_event)
        copy(result.combined_text)
        return result
