"""Prompt construction for smart file selection.

The model receives three messages: an instruction describing the expected
output, the serialized workspace tree, and the user's criteria verbatim.
"""

from typing import Optional

from ..core.models import ScanResult, SelectionConfig
from ..core.scanner import WorkspaceScanner
from ..core.tokenizer import TokenCounter
from ..utils.cancellation import CancellationToken
from ..utils.logging_config import get_logger
from ..utils.tree_formatter import PROMPT_MAX_LENGTH, format_file_tree
from .models.common import CompletionRequest, Message, MessageRole

logger = get_logger(__name__)


SELECTION_INSTRUCTIONS = """You are a file selection assistant for a software project.

You will be given the file tree of a workspace and a description of the files the user wants.
Select every file in the tree that matches the description.

Output rules:
- Respond with ONLY a JSON array of strings, for example ["src/app.ts", "tests/app.test.ts"].
- Each string is a file path relative to the workspace root shown on the first line of the tree.
- Use forward slashes. Do not include the root folder name, directories, or files not in the tree.
- If nothing matches, respond with [].
- Do not add explanations, comments, or any other text."""


def tree_message(root_name: str, tree_text: str) -> str:
    return f"Workspace file tree (root: {root_name}):\n\n{tree_text}"


def criteria_message(criteria: str) -> str:
    return f"Select the files matching this description:\n\n{criteria}"


class PromptBuilder:
    """Builds the completion request for one smart selection invocation."""

    def __init__(self, config: SelectionConfig, token_counter: Optional[TokenCounter] = None,
                 max_tree_length: int = PROMPT_MAX_LENGTH):
        self.config = config
        self.token_counter = token_counter
        self.max_tree_length = max_tree_length

    def build_messages(
        self,
        criteria: str,
        root_path: str,
        scan_result: Optional[ScanResult] = None,
        token: Optional[CancellationToken] = None,
    ) -> CompletionRequest:
        """
        Compose the request for the given criteria and workspace root.

        Scans the root when no scan result is supplied. The tree is rendered
        with no selection and the generous prompt-side length bound, so
        excluded entries never reach the model.

        Args:
            criteria: The user's free-text description, passed verbatim
            root_path: Workspace root
            scan_result: An existing scan of root_path to reuse
            token: Cancellation token forwarded to the scanner

        Returns:
            A fresh CompletionRequest with system, tree and criteria messages
        """
        if scan_result is None:
            scan_result = WorkspaceScanner(self.config).scan(root_path, token)

        tree_text = format_file_tree(
            root_path, scan_result.root, (), max_display_length=self.max_tree_length
        )
        request = CompletionRequest(messages=[
            Message(role=MessageRole.SYSTEM, content=SELECTION_INSTRUCTIONS),
            Message(role=MessageRole.USER, content=tree_message(scan_result.root.name, tree_text)),
            Message(role=MessageRole.USER, content=criteria_message(criteria)),
        ])

        if self.token_counter is not None:
            estimate = sum(self.token_counter.count(m.content) for m in request.messages)
            logger.debug(f"Built selection prompt (~{estimate:,} tokens)", extra={
                "file_count": scan_result.file_count,
            })
        return request
