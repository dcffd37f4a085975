"""
Host session and request dispatch.

A Session is the explicit object a host (editor panel, CLI, test) holds for
the lifetime of its UI. Incoming messages are converted once, at the
boundary, into typed requests; Session.handle() dispatches on the request
type and returns typed responses for the host to display.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..core.exceptions import ConfigError, SynextError, UnknownRequestError
from ..core.extractor import ExtractionCoordinator
from ..core.models import ExtractionMode, ExtractionResult, TextCounts
from ..core.tokenizer import TokenCounter
from .clipboard import copy_to_clipboard
from .config_store import ConfigStore
from .file_types import initialize_file_types

logger = logging.getLogger(__name__)


# Requests

@dataclass(frozen=True)
class RefreshFileTypes:
    pass


@dataclass(frozen=True)
class SetCompressionLevel:
    level: str


@dataclass(frozen=True)
class SetFileTypes:
    file_types: Tuple[str, ...]


@dataclass(frozen=True)
class SetClipboardBoxHeight:
    height: int


@dataclass(frozen=True)
class ToggleFileType:
    file_type: str


@dataclass(frozen=True)
class CountTokens:
    text: str


@dataclass(frozen=True)
class CountChars:
    text: str


@dataclass(frozen=True)
class RequestCounts:
    text: str


@dataclass(frozen=True)
class ExtractRequest:
    paths: Tuple[str, ...]
    mode: ExtractionMode = ExtractionMode.FULL
    copy: bool = False


Request = Union[
    RefreshFileTypes, SetCompressionLevel, SetFileTypes, SetClipboardBoxHeight,
    ToggleFileType, CountTokens, CountChars, RequestCounts, ExtractRequest,
]


# Responses

@dataclass(frozen=True)
class ConfigUpdated:
    config: Dict[str, Any]


@dataclass(frozen=True)
class RefreshComplete:
    file_types: Tuple[str, ...]


@dataclass(frozen=True)
class TokenCount:
    count: int


@dataclass(frozen=True)
class CharCount:
    count: int


@dataclass(frozen=True)
class ClipboardUpdate:
    content: str
    counts: TextCounts


@dataclass(frozen=True)
class ExtractionDone:
    result: ExtractionResult
    copied: bool = False


@dataclass(frozen=True)
class RequestFailed:
    message: str


Response = Union[
    ConfigUpdated, RefreshComplete, TokenCount, CharCount, ClipboardUpdate,
    ExtractionDone, RequestFailed,
]


def _strings(message: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    """A list-valued field; a bare string counts as a one-item list."""
    values = message.get(key) or []
    if isinstance(values, str):
        values = [values]
    return tuple(str(v) for v in values)


_REQUEST_PARSERS: Dict[str, Callable[[Mapping[str, Any]], Request]] = {
    'refreshFileTypes': lambda m: RefreshFileTypes(),
    'setCompressionLevel': lambda m: SetCompressionLevel(str(m.get('level', ''))),
    'setFileTypes': lambda m: SetFileTypes(_strings(m, 'fileTypes')),
    'setClipboardDataBoxHeight': lambda m: SetClipboardBoxHeight(m.get('height')),
    'updateFileTypes': lambda m: ToggleFileType(str(m.get('fileType', ''))),
    'countTokens': lambda m: CountTokens(str(m.get('text', ''))),
    'countChars': lambda m: CountChars(str(m.get('text', ''))),
    'requestCounts': lambda m: RequestCounts(str(m.get('text', ''))),
    'extractFileFolderTree': lambda m: ExtractRequest(_strings(m, 'paths'), ExtractionMode.TREE_ONLY, copy=True),
    'extractAndCopyText': lambda m: ExtractRequest(_strings(m, 'paths'), ExtractionMode.FULL, copy=True),
}


def parse_request(message: Mapping[str, Any]) -> Request:
    """
    Convert a host message such as {'command': 'countTokens', 'text': ...}.

    Raises:
        UnknownRequestError: If the command has no request type.
    """
    command = message.get('command')
    parser = _REQUEST_PARSERS.get(command)
    if parser is None:
        raise UnknownRequestError(f"Unknown command: {command!r}")
    return parser(message)


@dataclass
class Session:
    """State a host keeps between requests."""

    store: ConfigStore
    workspace_root: Optional[Path] = None
    coordinator: ExtractionCoordinator = field(default_factory=ExtractionCoordinator)
    token_counter: TokenCounter = field(default_factory=TokenCounter)
    clipboard_writer: Callable[[str], None] = copy_to_clipboard

    def initial_config(self) -> ConfigUpdated:
        """
        Configuration to send when a host view opens.

        On first run, before any settings were saved, the file types are
        seeded from the suffixes present in the workspace.
        """
        if not self.store.exists():
            initialize_file_types(self.store, self._workspace())
        return self._config_updated()

    def _config_updated(self) -> ConfigUpdated:
        return ConfigUpdated(self.store.snapshot())

    def _workspace(self) -> Path:
        return self.workspace_root or Path.cwd()

    def on_clipboard_change(self, content: str, counts: Optional[TextCounts] = None) -> ClipboardUpdate:
        """Counts for new clipboard content pushed by a clipboard watcher."""
        return ClipboardUpdate(content, counts or self.token_counter.measure(content))

    def handle(self, request: Request) -> List[Response]:
        """
        Dispatch a request.

        Configuration changes are answered with a ConfigUpdated snapshot.
        Invalid values and failed extractions become RequestFailed.
        """
        try:
            return self._dispatch(request)
        except SynextError as e:
            logger.warning(f"{type(request).__name__} failed: {e}")
            return [RequestFailed(str(e))]

    def _dispatch(self, request: Request) -> List[Response]:
        match request:
            case RefreshFileTypes():
                file_types = initialize_file_types(self.store, self._workspace(), force=True)
                return [RefreshComplete(tuple(file_types)), self._config_updated()]
            case SetCompressionLevel(level=level):
                self.store.set_compression_level(level)
                return [self._config_updated()]
            case SetFileTypes(file_types=file_types):
                try:
                    self.store.set_file_types(file_types)
                except ValueError as e:
                    raise ConfigError(str(e)) from e
                return [self._config_updated()]
            case SetClipboardBoxHeight(height=height):
                self.store.set_clipboard_box_height(height)
                return [self._config_updated()]
            case ToggleFileType(file_type=file_type):
                try:
                    self.store.toggle_file_type(file_type)
                except ValueError as e:
                    raise ConfigError(str(e)) from e
                return [self._config_updated()]
            case CountTokens(text=text):
                return [TokenCount(self.token_counter.count(text))]
            case CountChars(text=text):
                return [CharCount(len(text))]
            case RequestCounts(text=text):
                counts = self.token_counter.measure(text)
                return [TokenCount(counts.token_count), CharCount(counts.char_count)]
            case ExtractRequest(paths=paths, mode=mode, copy=copy):
                return [self._extract(paths, mode, copy)]
            case _:
                raise UnknownRequestError(f"Unsupported request: {request!r}")

    def _extract(self, paths: Tuple[str, ...], mode: ExtractionMode, copy: bool) -> ExtractionDone:
        config = self.store.extraction_config()
        result = self.coordinator.extract(list(paths), config, mode)
        if copy:
            self.clipboard_writer(result.combined_text)
        return ExtractionDone(result, copied=copy)
