"""Plain-text rendering of scanned workspace trees."""

import os
from typing import Iterable, List, Set

from ..core.models import TreeNode

INDENT = "  "
SELECTED_MARKER = "  [selected]"

# Bound used for summaries shown to the user
DISPLAY_MAX_LENGTH = 2000
# Bound used for the tree sent to the model
PROMPT_MAX_LENGTH = 120_000


def truncation_suffix(omitted: int, leading_newline: bool = True) -> str:
    """Summary line appended when entries are cut from a rendering."""
    noun = "entry" if omitted == 1 else "entries"
    line = f"... {omitted} more {noun} omitted"
    return f"\n{line}" if leading_newline else line


def _normalize_selection(root_path: str, selected_paths: Iterable[str]) -> Set[str]:
    normalized = set()
    for selected in selected_paths:
        if not selected:
            continue
        candidate = selected.replace('\\', '/')
        if not os.path.isabs(candidate):
            candidate = os.path.join(root_path, candidate)
        normalized.add(os.path.normpath(candidate))
    return normalized


def _render(node: TreeNode, selected: Set[str], depth: int, lines: List[str]) -> None:
    # Directories first, then files, alphabetical within each kind
    for child in sorted(node.children, key=lambda x: (not x.is_dir, x.name)):
        prefix = INDENT * depth
        marker = SELECTED_MARKER if os.path.normpath(child.path) in selected else ""
        if child.is_dir:
            lines.append(f"{prefix}{child.name}/{marker}")
            _render(child, selected, depth + 1, lines)
        else:
            lines.append(f"{prefix}{child.name}{marker}")


def render_tree_lines(root_path: str, tree: TreeNode, selected_paths: Iterable[str] = ()) -> List[str]:
    """Render every entry of the tree, one line per entry, root first."""
    selected = _normalize_selection(root_path, selected_paths)
    root_name = os.path.basename(os.path.normpath(root_path)) or root_path
    lines = [f"{root_name}/"]
    _render(tree, selected, 1, lines)
    return lines


def format_file_tree(
    root_path: str,
    tree: TreeNode,
    selected_paths: Iterable[str] = (),
    max_display_length: int = DISPLAY_MAX_LENGTH,
) -> str:
    """
    Render a tree as an indented listing, marking selected entries.

    Selected paths may be absolute or relative to root_path. When the
    rendering is longer than max_display_length characters it is cut at a
    line boundary and a "N more entries omitted" line is appended, so the
    result never exceeds max_display_length plus the suffix length.

    The function is pure: it touches neither the filesystem nor any state.
    """
    lines = render_tree_lines(root_path, tree, selected_paths)
    full = "\n".join(lines)
    if len(full) <= max_display_length:
        return full

    kept: List[str] = []
    used = 0
    for line in lines:
        extra = len(line) + (1 if kept else 0)
        if used + extra > max_display_length:
            break
        kept.append(line)
        used += extra

    omitted = len(lines) - len(kept)
    if not kept:
        return truncation_suffix(omitted, leading_newline=False)
    return "\n".join(kept) + truncation_suffix(omitted)
