"""Host-side glue: settings, clipboard, workspace detection and request dispatch."""

from .config_store import ConfigStore, get_config_store, teardown_config_store
from .clipboard import ClipboardWatcher, copy_to_clipboard
from .file_types import detect_workspace_file_types, initialize_file_types
from .session import Session, parse_request

__all__ = [
    "ConfigStore",
    "get_config_store",
    "teardown_config_store",
    "ClipboardWatcher",
    "copy_to_clipboard",
    "detect_workspace_file_types",
    "initialize_file_types",
    "Session",
    "parse_request",
]
