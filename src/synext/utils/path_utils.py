"""Path normalization utilities for cross-platform compatibility."""

import os


class PathUtils:
    """Utilities for consistent path handling across platforms."""

    @staticmethod
    def normalize_path(path: str) -> str:
        """
        Normalize path separators to forward slashes.

        Args:
            path: File path with potentially mixed separators

        Returns:
            Path with forward slashes only
        """
        return path.replace('\\\\', '/').replace('\\', '/')

    @staticmethod
    def display_name(path: str) -> str:
        """
        Name shown for a selected root.

        Falls back to the normalized path for filesystem roots, which have no base name.
        """
        stripped = path.rstrip('/\\') or path
        return os.path.basename(stripped) or PathUtils.normalize_path(path)

    @staticmethod
    def expand(path: str) -> str:
        """Expand '~' and make a selected path absolute without resolving symlinks."""
        return os.path.abspath(os.path.expanduser(str(path)))
