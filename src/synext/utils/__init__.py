"""Utility modules for synext."""

from .file_filter import FilterPolicy
from .encodings import EncodingDetector
from .path_utils import PathUtils
from .tree_renderer import TreeRenderer

__all__ = ["FilterPolicy", "EncodingDetector", "PathUtils", "TreeRenderer"]
