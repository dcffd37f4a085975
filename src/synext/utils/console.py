"""Themed console output for the synext command line.

Wraps a Rich console with a small set of named themes and status helpers,
and falls back to plain print() when output is not a terminal.
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.text import Text
from rich.theme import Theme


class StatusType(Enum):
    """Standard status types with associated symbols."""
    SUCCESS = ("[✓]", "success", "green")
    ERROR = ("[x]", "error", "red")
    WARNING = ("[!]", "warning", "yellow")
    INFO = ("[i]", "info", "cyan")


@dataclass
class ThemeColors:
    """Color definitions for a theme."""
    info: str
    warning: str
    error: str
    success: str
    highlight: str
    path: str
    number: str
    dim: str
    heading: str = "bright_yellow"


THEMES = {
    'manhattan': ThemeColors(
        info='cyan',
        warning='yellow',
        error='red',
        success='green',
        highlight='bright_cyan',
        path='white',
        number='bright_blue',
        dim='bright_black',
    ),
    'sunset': ThemeColors(
        info='orange3',
        warning='yellow',
        error='red3',
        success='green',
        highlight='bold orange1',
        path='wheat1',
        number='orange1',
        dim='grey50',
        heading='dark_orange3',
    ),
    'matrix': ThemeColors(
        info='bright_green',
        warning='yellow',
        error='red',
        success='green',
        highlight='bold bright_green',
        path='green',
        number='bright_green',
        dim='green',
    ),
}


class ConsoleManager:
    """Console with theme support and plain-text fallback."""

    def __init__(self, theme: str = "manhattan", file: Optional[Any] = None,
                 force_plain: bool = False):
        """Initialize console.

        Args:
            theme: Theme name from THEMES
            file: Output file (defaults to sys.stderr, keeping stdout for results)
            force_plain: Force plain output even on a terminal
        """
        self.theme_name = theme
        self.theme_colors = THEMES.get(theme, THEMES['manhattan'])
        self.file = file or sys.stderr
        self.use_rich = not force_plain and self._should_use_rich_terminal()

        if self.use_rich:
            self.console = Console(
                theme=self._create_rich_theme(),
                file=self.file,
                force_terminal=True,
                highlight=False,
            )
        else:
            self.console = None

    def _should_use_rich_terminal(self) -> bool:
        """Terminal detection honouring NO_COLOR and FORCE_COLOR."""
        if os.environ.get('NO_COLOR'):
            return False
        if os.environ.get('FORCE_COLOR'):
            return True
        return hasattr(self.file, 'isatty') and self.file.isatty()

    def _create_rich_theme(self) -> Theme:
        colors = self.theme_colors
        return Theme({
            'info': colors.info,
            'warning': colors.warning,
            'error': colors.error,
            'success': colors.success,
            'highlight': colors.highlight,
            'path': colors.path,
            'number': colors.number,
            'dim': colors.dim,
            'heading': colors.heading,
        })

    def print_status(self, status: StatusType, message: str):
        """Print a status line with icon."""
        icon, _, color = status.value
        if self.use_rich:
            status_text = Text()
            status_text.append(f"{icon} ", style=color)
            status_text.append(message)
            self.console.print(status_text)
        else:
            print(f"{icon} {message}", file=self.file)

    def print_error(self, message: str):
        self.print_status(StatusType.ERROR, message)

    def print_success(self, message: str):
        self.print_status(StatusType.SUCCESS, message)

    def print_info(self, message: str):
        self.print_status(StatusType.INFO, message)

    def print_warning(self, message: str):
        self.print_status(StatusType.WARNING, message)

    def print_metric(self, heading: str, value: Any):
        """Print a heading and a number, e.g. 'TOKENS: 1,234'."""
        formatted = f"{value:,}" if isinstance(value, int) else str(value)
        if self.use_rich:
            text = Text()
            text.append(f"{heading}: ", style=self.theme_colors.heading)
            text.append(formatted, style=self.theme_colors.number)
            self.console.print(text)
        else:
            print(f"{heading}: {formatted}", file=self.file)

    def print_exception(self):
        """Print exception traceback with Rich formatting if available."""
        if self.use_rich:
            self.console.print_exception()
        else:
            import traceback
            traceback.print_exc(file=self.file)
