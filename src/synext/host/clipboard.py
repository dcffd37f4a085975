"""
System clipboard access and change observation.

The watcher polls the clipboard on an interval and pushes changed content,
with its counts, to a callback. It is host plumbing; the counts come from
the same pure counter the engine uses.
"""

import logging
import threading
from typing import Callable, Optional

import pyperclip

from ..core.exceptions import SynextError
from ..core.models import TextCounts
from ..core.tokenizer import TokenCounter

DEFAULT_POLL_INTERVAL = 0.8  # seconds

logger = logging.getLogger(__name__)


class ClipboardError(SynextError):
    """The system clipboard is not available."""


def copy_to_clipboard(text: str) -> None:
    """Place text on the system clipboard."""
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Clipboard unavailable: {e}") from e


def read_clipboard() -> str:
    """Read text from the system clipboard."""
    try:
        return pyperclip.paste() or ""
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Clipboard unavailable: {e}") from e


class ClipboardWatcher:
    """Polls the clipboard and reports changes."""

    def __init__(self, on_change: Callable[[str, TextCounts], None],
                 interval: float = DEFAULT_POLL_INTERVAL,
                 reader: Callable[[], str] = read_clipboard,
                 counter: Optional[TokenCounter] = None):
        """
        Initialize the watcher.

        Args:
            on_change: Called with (content, counts) whenever content changes.
            interval: Seconds between polls.
            reader: Clipboard reader, replaceable for headless hosts and tests.
            counter: Token counter for the reported counts.
        """
        self.on_change = on_change
        self.interval = interval
        self.reader = reader
        self.counter = counter or TokenCounter()
        self.last_content: Optional[str] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> bool:
        """
        Read the clipboard once and report a change.

        Returns:
            True if the content changed since the previous poll.
        """
        content = self.reader()
        if content == self.last_content:
            return False
        self.last_content = content
        self.on_change(content, self.counter.measure(content))
        return True

    def start(self) -> None:
        """Start polling in a daemon thread. The first poll happens immediately."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="synext-clipboard", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop polling and wait for the thread to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout if timeout is not None else self.interval * 2)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except ClipboardError as e:
                logger.warning(f"Clipboard poll failed: {e}")
            if self._stop.wait(self.interval):
                break

    def __enter__(self) -> 'ClipboardWatcher':
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
