"""Path normalization utilities for cross-platform compatibility."""

import os
from typing import List, Optional


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
    def normalize_and_split(path: str) -> List[str]:
        """
        Normalize path and split into non-empty components.

        Args:
            path: File path to split

        Returns:
            List of path components
        """
        return [part for part in PathUtils.normalize_path(path).split('/') if part and part != '.']

    @staticmethod
    def relative_to(root: str, path: str) -> Optional[str]:
        """
        Express an absolute path relative to root, using forward slashes.

        Returns None when path lies outside root.
        """
        root_abs = os.path.abspath(root)
        path_abs = os.path.abspath(path)
        if path_abs == root_abs:
            return ''
        if not path_abs.startswith(root_abs.rstrip(os.sep) + os.sep):
            return None
        return PathUtils.normalize_path(os.path.relpath(path_abs, root_abs))

    @staticmethod
    def is_within(root: str, path: str) -> bool:
        """Check if path is root itself or lies below it."""
        return PathUtils.relative_to(root, path) is not None
