"""
Core data models for smartadd.

This module contains the fundamental data structures used throughout
the application for exclusion settings, workspace trees, and the
results of scanning and reconciliation.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple, TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from .errors import ScanError

# Load environment variables from .env file
load_dotenv()


def _split_env_list(name: str, default: Set[str]) -> Set[str]:
    """Read a comma separated environment variable into a set."""
    raw = os.getenv(name)
    if raw is None:
        return set(default)
    return {item.strip() for item in raw.split(',') if item.strip()}


def _normalize_extension(ext: str) -> str:
    return ext if ext.startswith('.') else f'.{ext}'


@dataclass
class SelectionConfig:
    """Exclusion rules and limits applied while scanning a workspace."""

    excluded_extensions: Set[str] = field(default_factory=lambda: _split_env_list(
        'SMARTADD_EXCLUDED_FILE_TYPES', {'.exe', '.bin'}
    ))
    excluded_folders: Set[str] = field(default_factory=lambda: _split_env_list(
        'SMARTADD_EXCLUDED_FOLDERS', {'node_modules', '.git'}
    ))
    # Scans with more files than this are flagged so the caller can warn
    file_threshold: int = field(default_factory=lambda: int(os.getenv('SMARTADD_FILE_THRESHOLD', '15')))

    # Limits used when a selected file is read into a context bundle
    max_file_size: int = 1024 * 1024  # 1MB default
    encoding_fallbacks: List[str] = field(default_factory=lambda: [
        'utf-8', 'utf-8-sig', 'latin-1', 'cp1252'
    ])
    binary_sample_size: int = 8192
    token_encoder: str = "cl100k_base"

    def __post_init__(self):
        self.excluded_extensions = {_normalize_extension(ext) for ext in self.excluded_extensions}
        self.excluded_folders = set(self.excluded_folders)
        if self.file_threshold < 0:
            raise ValueError(f"file_threshold must be non-negative, got {self.file_threshold}")


@dataclass(frozen=True)
class TreeNode:
    """A file or directory in a scanned workspace."""

    name: str
    path: str  # absolute path
    type: str  # 'file' or 'dir'
    children: Tuple['TreeNode', ...] = ()

    def is_file(self) -> bool:
        """Check if this node represents a file."""
        return self.type == 'file'

    def is_directory(self) -> bool:
        """Check if this node represents a directory."""
        return self.type == 'dir'

    @property
    def is_dir(self) -> bool:
        """Alias for is_directory for compatibility."""
        return self.is_directory()

    def iter_files(self):
        """Yield every file node below (and including) this node, depth first."""
        if self.is_file():
            yield self
            return
        for child in self.children:
            yield from child.iter_files()

    def iter_directories(self):
        """Yield every directory node below (and including) this node."""
        if not self.is_directory():
            return
        yield self
        for child in self.children:
            yield from child.iter_directories()

    def count_files(self) -> int:
        return sum(1 for _ in self.iter_files())


@dataclass(frozen=True)
class ScanResult:
    """Result of scanning a workspace root."""

    root: TreeNode
    file_count: int
    cancelled: bool = False
    over_threshold: bool = False
    errors: Tuple['ScanError', ...] = ()
    directories_scanned: int = 0

    @property
    def root_path(self) -> str:
        return self.root.path

    def file_paths(self) -> List[str]:
        """Absolute paths of every scanned file in traversal order."""
        return [node.path for node in self.root.iter_files()]

    def has_errors(self) -> bool:
        """Check if any entries were skipped during the scan."""
        return len(self.errors) > 0


@dataclass(frozen=True)
class ReconciliationWarning:
    """A model-returned path that could not be matched to a real file."""

    input_path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.input_path}: {self.reason}"


@dataclass(frozen=True)
class ReconciliationResult:
    """Model output mapped onto real workspace files."""

    matched: Tuple[str, ...]          # absolute paths, deduplicated, model order
    unmatched_inputs: Tuple[str, ...]  # raw inputs, model order
    distinct_folder_count: int
    warnings: Tuple[ReconciliationWarning, ...] = ()

    @property
    def matched_set(self) -> Set[str]:
        return set(self.matched)

    def has_unmatched(self) -> bool:
        return len(self.unmatched_inputs) > 0

    def get_warning_summary(self) -> Optional[str]:
        """Get a summary of unmatched paths, or None when everything matched."""
        if not self.warnings:
            return None
        return f"{len(self.warnings)} path(s) could not be matched:\n" + "\n".join(
            f"- {w}" for w in self.warnings
        )
