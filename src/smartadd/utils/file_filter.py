"""
Exclusion filtering for smartadd.

This module decides which workspace entries are skipped before they
ever reach the model: directories by exact folder name and files by
extension.
"""

import os
from typing import Optional

from ..core.models import SelectionConfig


class ExclusionFilter:
    """Handles exclusion logic for folders and file extensions."""

    def __init__(self, config: SelectionConfig):
        self.config = config

    @staticmethod
    def extension_of(entry_name: str) -> str:
        """
        Get the extension of an entry name, including the leading dot.

        Dotfiles such as ".env" have no extension.
        """
        return os.path.splitext(entry_name)[1]

    def should_exclude_directory(self, dir_name: str) -> bool:
        """
        Check if a directory should be excluded.

        Args:
            dir_name: Name of the directory (not full path).

        Returns:
            True if directory should be excluded, False otherwise.
        """
        return dir_name in self.config.excluded_folders

    def should_exclude_file(self, file_name: str, extension: Optional[str] = None) -> bool:
        """
        Check if a file should be excluded by its extension.

        Args:
            file_name: Name of the file (not full path).
            extension: Pre-computed extension, derived from the name if omitted.

        Returns:
            True if file should be excluded, False otherwise.
        """
        if extension is None:
            extension = self.extension_of(file_name)
        return bool(extension) and extension in self.config.excluded_extensions

    def should_exclude(self, entry_name: str, entry_type: str, extension: Optional[str] = None) -> bool:
        """
        Check an entry of either kind. Never raises.

        Args:
            entry_name: Name of the entry (not full path).
            entry_type: 'dir' or 'file'.
            extension: Optional pre-computed extension for files.
        """
        if entry_type == 'dir':
            return self.should_exclude_directory(entry_name)
        return self.should_exclude_file(entry_name, extension)

    def get_excluded_reason(self, entry_name: str, entry_type: str) -> Optional[str]:
        """
        Get the reason why an entry would be excluded.

        Returns:
            Reason string if entry would be excluded, None otherwise.
        """
        if entry_type == 'dir' and self.should_exclude_directory(entry_name):
            return "Excluded folder"
        if entry_type != 'dir' and self.should_exclude_file(entry_name):
            return f"Excluded file type ({self.extension_of(entry_name)})"
        return None
