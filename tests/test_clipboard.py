import threading
from unittest.mock import MagicMock, patch

import pytest
import pyperclip
from synext.core.models import TextCounts
from synext.host.clipboard import (
    ClipboardError,
    ClipboardWatcher,
    copy_to_clipboard,
    read_clipboard,
)


class FakeClipboard:
    def __init__(self, *contents):
        self.contents = list(contents)

    def __call__(self):
        if len(self.contents) > 1:
            return self.contents.pop(0)
        return self.contents[0]


class TestClipboardAccess:
    def test_copy(self):
        with patch('synext.host.clipboard.pyperclip.copy') as mock_copy:
            copy_to_clipboard("text")
            mock_copy.assert_called_once_with("text")

    def test_copy_unavailable(self):
        with patch('synext.host.clipboard.pyperclip.copy',
                   side_effect=pyperclip.PyperclipException("no clipboard")):
            with pytest.raises(ClipboardError):
                copy_to_clipboard("text")

    def test_read(self):
        with patch('synext.host.clipboard.pyperclip.paste', return_value="pasted"):
            assert read_clipboard() == "pasted"

    def test_read_unavailable(self):
        with patch('synext.host.clipboard.pyperclip.paste',
                   side_effect=pyperclip.PyperclipException("no clipboard")):
            with pytest.raises(ClipboardError):
                read_clipboard()


class TestClipboardWatcher:
    def test_poll_reports_changes_only(self):
        on_change = MagicMock()
        watcher = ClipboardWatcher(on_change, reader=FakeClipboard("a.b", "a.b", "xyz"))

        assert watcher.poll_once() is True
        assert watcher.poll_once() is False
        assert watcher.poll_once() is True

        assert on_change.call_args_list[0].args == ("a.b", TextCounts(char_count=3, token_count=3))
        assert on_change.call_args_list[1].args == ("xyz", TextCounts(char_count=3, token_count=1))

    def test_thread_polls_immediately(self):
        received = threading.Event()
        watcher = ClipboardWatcher(lambda content, counts: received.set(),
                                   interval=0.05, reader=FakeClipboard("hello"))

        with watcher:
            assert received.wait(2.0)
            assert watcher.running

        assert not watcher.running

    def test_reader_errors_do_not_stop_watcher(self):
        calls = []

        def reader():
            calls.append(1)
            if len(calls) == 1:
                raise ClipboardError("busy")
            return "ok"

        received = threading.Event()
        watcher = ClipboardWatcher(lambda content, counts: received.set(), interval=0.05, reader=reader)
        watcher.start()
        try:
            assert received.wait(2.0)
        finally:
            watcher.stop()
