"""Registration of selected files as assistant context."""

import asyncio
import os
from typing import Dict, List, Optional, Protocol, Sequence

from ..core.file_analyzer import FileAnalyzer
from ..core.models import SelectionConfig
from ..core.tokenizer import TokenCounter
from ..utils.logging_config import get_logger
from ..utils.path_utils import PathUtils

logger = get_logger(__name__)


class ContextRegistrar(Protocol):
    """Registers one absolute file path as context; returns success."""

    async def register(self, file_path: str) -> bool:
        ...


async def register_all(registrar: ContextRegistrar, file_paths: Sequence[str]) -> int:
    """Register files concurrently and return how many succeeded.

    A registration that raises, or is cancelled, counts as a failure and
    never stops the rest of the batch.
    """
    if not file_paths:
        return 0
    results = await asyncio.gather(
        *(registrar.register(path) for path in file_paths), return_exceptions=True
    )
    registered = 0
    for path, result in zip(file_paths, results):
        if isinstance(result, BaseException):
            logger.warning(f"Registering {path} raised {type(result).__name__}: {result}")
        elif result is True:
            registered += 1
    return registered


class ContextBundleRegistrar:
    """Collects selected files into a markdown context bundle.

    Each register call reads one file (size limit, binary detection and
    encoding fallbacks apply). Failures are logged and reported as False.
    Entries are rendered in path order regardless of registration order.
    """

    def __init__(self, root_path: str, config: SelectionConfig,
                 token_counter: Optional[TokenCounter] = None):
        self.root_path = os.path.abspath(root_path)
        self.config = config
        self.file_analyzer = FileAnalyzer(config)
        self.token_counter = token_counter
        self.contents: Dict[str, str] = {}
        self.errors: Dict[str, str] = {}

    async def register(self, file_path: str) -> bool:
        content, error = await asyncio.to_thread(self.file_analyzer.read_file_content, file_path)
        rel_path = self._display_path(file_path)
        if error is not None:
            self.errors[rel_path] = error
            logger.warning(f"Could not add {rel_path}: {error}")
            return False
        self.contents[rel_path] = content
        return True

    def _display_path(self, file_path: str) -> str:
        rel = PathUtils.relative_to(self.root_path, file_path)
        return rel if rel is not None else file_path

    @property
    def total_tokens(self) -> int:
        if self.token_counter is None:
            return 0
        return sum(self.token_counter.count(content) for content in self.contents.values())

    def render(self, criteria: str = "", tree_text: str = "") -> str:
        """Render the bundle as markdown."""
        root_name = os.path.basename(self.root_path) or self.root_path
        parts: List[str] = [f"# Context: {root_name}\n"]
        if criteria:
            parts.append(f"## Selection Criteria\n\n{criteria}\n")
        if tree_text:
            parts.append(f"## Structure\n\n```\n{tree_text}\n```\n")

        parts.append(f"## Total Files: {len(self.contents)}")
        if self.token_counter is not None:
            parts.append(f"## Total Tokens: {self.total_tokens:,}")

        parts.append("\n## File Contents\n")
        for rel_path in sorted(self.contents):
            parts.append(f"```{rel_path}\n{self.contents[rel_path]}\n```\n")

        if self.errors:
            parts.append("## Errors Encountered\n")
            for rel_path in sorted(self.errors):
                parts.append(f"- {rel_path}: {self.errors[rel_path]}")
            parts.append("")
        return "\n".join(parts)

    def write(self, output_path: str, criteria: str = "", tree_text: str = "") -> str:
        """Write the bundle and return its path."""
        directory = os.path.dirname(os.path.abspath(output_path))
        os.makedirs(directory, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.render(criteria, tree_text))
        logger.debug(f"Wrote context bundle to {output_path}", extra={"file_count": len(self.contents)})
        return output_path
