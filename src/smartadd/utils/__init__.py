"""Utility modules for smartadd."""

from .cancellation import CancellationToken
from .file_filter import ExclusionFilter
from .path_utils import PathUtils
from .tree_formatter import format_file_tree

__all__ = ["CancellationToken", "ExclusionFilter", "PathUtils", "format_file_tree"]
