"""Workspace scanning: walk a root directory into an immutable TreeNode tree."""

import os
from typing import List, Optional, Set, Tuple

from .errors import ScanError
from .models import ScanResult, SelectionConfig, TreeNode
from ..utils.cancellation import CancellationToken, NONE
from ..utils.file_filter import ExclusionFilter
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class WorkspaceScanner:
    """Depth-first scanner applying exclusion rules.

    A scanner instance holds the state of a single scan; use a fresh one
    (or call scan again, which resets it) per invocation.
    """

    def __init__(self, config: SelectionConfig):
        self.config = config
        self.file_filter = ExclusionFilter(config)
        self._reset()

    def _reset(self) -> None:
        self._errors: List[ScanError] = []
        self._visited: Set[Tuple[int, int]] = set()
        self._file_count = 0
        self._dirs_scanned = 0
        self._cancelled = False
        self._recursive = True
        self._token: CancellationToken = NONE

    def scan(self, root_path: str, token: Optional[CancellationToken] = None,
             recursive: bool = True) -> ScanResult:
        """
        Scan a workspace root.

        With recursive=False only the files directly under root_path are
        listed.

        Unreadable entries and symlink cycles are skipped and recorded on
        the result. Cancellation is checked before each directory descent;
        a cancelled scan returns the partial tree with cancelled=True.

        Raises:
            ValueError: If root_path is not a directory.
        """
        if not os.path.isdir(root_path):
            raise ValueError(f"Path is not a directory: {root_path}")

        self._reset()
        self._token = token or NONE
        self._recursive = recursive
        root_abs = os.path.abspath(root_path)

        root = self._scan_directory(root_abs, os.path.basename(root_abs) or root_abs)
        if root is None:
            # Cancelled before the root was listed
            root = TreeNode(name=os.path.basename(root_abs) or root_abs, path=root_abs, type='dir')

        over_threshold = self._file_count > self.config.file_threshold
        logger.debug(
            f"Scanned {root_abs}: {self._file_count} files in {self._dirs_scanned} directories",
            extra={"cancelled": self._cancelled, "scan_errors": len(self._errors)},
        )
        return ScanResult(
            root=root,
            file_count=self._file_count,
            cancelled=self._cancelled,
            over_threshold=over_threshold,
            errors=tuple(self._errors),
            directories_scanned=self._dirs_scanned,
        )

    def _record_error(self, path: str, reason: str) -> None:
        error = ScanError(path, reason)
        self._errors.append(error)
        logger.warning(f"Skipping {path}: {reason}")

    def _scan_directory(self, dir_path: str, name: str) -> Optional[TreeNode]:
        """Scan one directory; returns None if it was skipped or never entered."""
        if self._cancelled or self._token.is_cancelled:
            self._cancelled = True
            return None

        try:
            stat = os.stat(dir_path)
        except OSError as e:
            self._record_error(dir_path, f"cannot stat directory ({e.strerror or e})")
            return None

        # Guard against symlink cycles and directories reachable twice
        identity = (stat.st_dev, stat.st_ino)
        if identity in self._visited:
            self._record_error(dir_path, "symlink cycle or duplicate directory")
            return None
        self._visited.add(identity)

        try:
            with os.scandir(dir_path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self._record_error(dir_path, f"cannot list directory ({e.strerror or e})")
            return None

        self._dirs_scanned += 1
        children: List[TreeNode] = []

        for entry in entries:
            if self._cancelled:
                break
            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
            except OSError as e:
                self._record_error(entry.path, f"cannot read entry ({e.strerror or e})")
                continue

            if is_dir:
                if not self._recursive or self.file_filter.should_exclude_directory(entry.name):
                    continue
                child = self._scan_directory(entry.path, entry.name)
                if child is not None:
                    children.append(child)
            elif is_file:
                if self.file_filter.should_exclude_file(entry.name):
                    continue
                children.append(TreeNode(name=entry.name, path=entry.path, type='file'))
                self._file_count += 1
            elif entry.is_symlink():
                self._record_error(entry.path, "broken symlink")
            # Sockets, fifos and devices are ignored

        return TreeNode(name=name, path=dir_path, type='dir', children=tuple(children))
