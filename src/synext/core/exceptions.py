"""Exception types raised by synext."""


class SynextError(Exception):
    """Base class for all synext errors."""


class EmptySelectionError(SynextError):
    """None of the selected paths resolves to an existing file or directory."""

    def __init__(self, paths=None):
        self.paths = list(paths or [])
        if self.paths:
            message = "No valid files or folders selected: " + ", ".join(str(p) for p in self.paths)
        else:
            message = "No files or folders selected."
        super().__init__(message)


class ExtractionCancelled(SynextError):
    """The caller cancelled an in-flight extraction."""


class UnknownRequestError(SynextError):
    """A host message names a command that has no request type."""


class ConfigError(SynextError):
    """A configuration value could not be read or stored."""
