"""Reconcile model-returned path strings against the real workspace."""

import os
from typing import Iterable, List, Optional, Set, Tuple

from .models import ReconciliationResult, ReconciliationWarning
from ..utils.logging_config import get_logger
from ..utils.path_utils import PathUtils

logger = get_logger(__name__)


class PathReconciler:
    """Maps path strings to existing files below a workspace root.

    Reconciliation never fails: paths that cannot be matched are kept as
    warnings for the caller to report.
    """

    def __init__(self, root_path: str):
        self.root_path = os.path.abspath(root_path)
        self.root_name = os.path.basename(self.root_path)

    def _candidates(self, raw: str) -> List[str]:
        """Absolute candidates for one input, most likely first."""
        stripped = raw.strip()
        if os.path.isabs(stripped):
            return [os.path.normpath(stripped)]

        parts = PathUtils.normalize_and_split(stripped)
        if not parts:
            return []
        candidates = [os.path.normpath(os.path.join(self.root_path, *parts))]
        # Models sometimes echo the root folder shown at the top of the tree
        if len(parts) > 1 and parts[0] == self.root_name:
            candidates.append(os.path.normpath(os.path.join(self.root_path, *parts[1:])))
        return candidates

    def resolve(self, raw: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Resolve a single path string.

        Returns:
            Tuple of (absolute_path, None) on a match, or (None, reason).
        """
        candidates = self._candidates(raw)
        if not candidates:
            return None, "empty path"

        reason = "file not found"
        for candidate in candidates:
            if not PathUtils.is_within(self.root_path, candidate):
                reason = "outside workspace root"
                continue
            if os.path.isfile(candidate):
                return candidate, None
            if os.path.isdir(candidate):
                reason = "is a directory"
        return None, reason

    def reconcile(self, selected_paths: Iterable[str]) -> ReconciliationResult:
        """
        Classify every input as matched or unmatched.

        Matched files are deduplicated by real path (so symlinked aliases
        collapse into the first one seen) and keep the order the model
        returned them in.
        """
        matched: List[str] = []
        matched_seen: Set[str] = set()
        unmatched: List[str] = []
        unmatched_seen: Set[str] = set()
        warnings: List[ReconciliationWarning] = []

        for raw in selected_paths:
            resolved, reason = self.resolve(raw)
            if resolved is not None:
                identity = os.path.realpath(resolved)
                if identity not in matched_seen:
                    matched_seen.add(identity)
                    matched.append(resolved)
                continue

            if raw in unmatched_seen:
                continue
            unmatched_seen.add(raw)
            unmatched.append(raw)
            warnings.append(ReconciliationWarning(input_path=raw, reason=reason))
            logger.warning(f"Unmatched path from model: {raw} ({reason})")

        folders = {os.path.dirname(identity) for identity in matched_seen}
        return ReconciliationResult(
            matched=tuple(matched),
            unmatched_inputs=tuple(unmatched),
            distinct_folder_count=len(folders),
            warnings=tuple(warnings),
        )


def reconcile_paths(root_path: str, selected_paths: Iterable[str]) -> ReconciliationResult:
    """Reconcile selected paths against root_path (convenience function)."""
    return PathReconciler(root_path).reconcile(selected_paths)
