"""
File filtering utilities for synext.

This module decides which paths take part in an extraction: a fixed ignore
set for version-control metadata, dependency caches, build output, binary
and lock files, plus the configurable suffix allow-list.
"""

from pathlib import Path
from typing import Optional

from ..core.models import ExtractionConfig


# Directories that are never descended into
IGNORED_DIRECTORIES = frozenset({
    # Version control
    '.git', '.hg', '.svn', '.bzr',
    # Dependency and package caches
    'node_modules', 'bower_components', 'jspm_packages', 'vendor',
    '.venv', 'venv', 'env', 'virtualenv', '.virtualenv',
    '__pycache__', '.mypy_cache', '.pytest_cache', '.ruff_cache', '.tox',
    '.gradle', '.m2', '.yarn', '.pnpm-store', '.cache', '.sass-cache', '.parcel-cache',
    # Build output
    'dist', 'build', 'out', 'target', 'coverage', '.next', '.nuxt', '.output',
    '.turbo', '.svelte-kit',
    # Editor state
    '.idea', '.vscode-test',
})

# Binary suffixes that are never listed
BINARY_EXTENSIONS = frozenset({
    # Executables & Libraries
    '.exe', '.dll', '.so', '.a', '.lib', '.dylib', '.o', '.obj', '.bin',
    # Archives
    '.zip', '.tar', '.gz', '.bz2', '.xz', '.7z', '.rar', '.jar', '.war', '.vsix',
    # Media
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.ico', '.webp', '.tiff',
    '.mp3', '.mp4', '.avi', '.mov', '.wmv', '.flv', '.webm',
    '.wav', '.flac', '.ogg', '.m4a', '.aac',
    '.ttf', '.otf', '.woff', '.woff2', '.eot',
    # Documents
    '.pdf', '.doc', '.docx', '.xls', '.xlsx', '.ppt', '.pptx',
    # Data
    '.db', '.sqlite', '.mdb', '.accdb',
    # Compiled
    '.pyc', '.pyo', '.pyd', '.whl', '.class', '.dex', '.apk', '.ipa', '.wasm',
})

# Lock files and generated artifacts that are never listed
IGNORED_FILE_NAMES = frozenset({
    'package-lock.json', 'yarn.lock', 'pnpm-lock.yaml', 'npm-shrinkwrap.json',
    'poetry.lock', 'Pipfile.lock', 'composer.lock', 'Cargo.lock', 'Gemfile.lock',
    'go.sum', 'bun.lockb', '.DS_Store', 'Thumbs.db',
})

IGNORED_FILE_PATTERNS = ('.min.js', '.min.css', '.map', '.lock')


class FilterPolicy:
    """Handles include/ignore decisions for walked paths."""

    @staticmethod
    def is_ignored(name: str, is_directory: bool) -> bool:
        """
        Check the fixed ignore set.

        Args:
            name: Base name of the entry (not full path).
            is_directory: Whether the entry is a directory.

        Returns:
            True if the entry must not appear in the tree at all.
        """
        if is_directory:
            return name in IGNORED_DIRECTORIES
        if name in IGNORED_FILE_NAMES:
            return True
        lowered = name.lower()
        if Path(lowered).suffix in BINARY_EXTENSIONS:
            return True
        return lowered.endswith(IGNORED_FILE_PATTERNS)

    @classmethod
    def should_include(cls, path: str, is_directory: bool, config: ExtractionConfig) -> bool:
        """
        Decide whether a path takes part in the extraction.

        Directories are included unless ignored (whether they end up in the
        tree depends on their descendants). Files are included iff their
        suffix is in the configured file types.

        Args:
            path: Path of the entry.
            is_directory: Whether the entry is a directory.
            config: Extraction settings holding the suffix allow-list.

        Returns:
            True if the entry should be included.
        """
        name = Path(path).name
        if cls.is_ignored(name, is_directory):
            return False
        if is_directory:
            return True
        suffix = Path(name).suffix.lower()
        if not suffix:
            return False
        return suffix in config.file_types

    @classmethod
    def get_excluded_reason(cls, path: str, is_directory: bool, config: ExtractionConfig) -> Optional[str]:
        """
        Get the reason why a path would be excluded.

        Returns:
            Reason string if the path would be excluded, None otherwise.
        """
        name = Path(path).name
        if cls.is_ignored(name, is_directory):
            return "Ignored directory" if is_directory else "Ignored binary or lock file"
        if is_directory:
            return None
        suffix = Path(name).suffix.lower()
        if not suffix:
            return "No file suffix"
        if suffix not in config.file_types:
            return f"File type {suffix} not selected"
        return None
