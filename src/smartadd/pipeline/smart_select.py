"""Smart selection controller.

Drives scan -> prompt -> request -> parse -> reconcile -> register for one
natural-language criteria string, reporting weighted progress and checking
the cancellation token between stages.
"""

import asyncio
import os
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence, Tuple

from ..ai.adapter.base import BaseLLMAdapter
from ..ai.parser import parse_llm_response
from ..ai.prompts import PromptBuilder
from ..core.errors import NetworkError, ParseError, PipelineStage, ScanError, SmartAddError
from ..core.models import ReconciliationResult, ScanResult, SelectionConfig
from ..core.reconciler import PathReconciler
from ..core.scanner import WorkspaceScanner
from ..core.tokenizer import TokenCounter
from ..utils.cancellation import CancellationToken, NONE
from ..utils.logging_config import get_logger, reset_context, set_context
from ..utils.path_utils import PathUtils
from ..utils.tree_formatter import DISPLAY_MAX_LENGTH, format_file_tree
from .registrar import ContextRegistrar, register_all
from .telemetry import ADD_SMART_SELECTION, LoggingTelemetry, TelemetrySink

logger = get_logger(__name__)

# Progress weights, summing to 100
SCAN_WEIGHT = 20
PROMPT_WEIGHT = 30
REQUEST_WEIGHT = 20
PARSE_WEIGHT = 15
REGISTER_WEIGHT = 15


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    ABORTED = "aborted"


class ProgressReporter(Protocol):
    def report(self, increment: float, message: str) -> None:
        ...


class NullProgress:
    """Progress reporter that discards everything."""

    def report(self, increment: float, message: str) -> None:
        pass


@dataclass(frozen=True)
class SmartSelectOutcome:
    """Result of one smart selection invocation."""

    status: OutcomeStatus
    criteria: str
    root_path: str
    message: str
    failed_stage: Optional[PipelineStage] = None
    error: Optional[SmartAddError] = None
    registered_count: int = 0
    total_files: int = 0
    folder_count: int = 0
    tree_text: str = ""
    reconciliation: Optional[ReconciliationResult] = None
    scan_errors: Tuple[ScanError, ...] = ()
    over_threshold: bool = False
    raw_response: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def headline(self) -> str:
        return f"{self.registered_count}/{self.total_files} files successfully added"

    def warnings(self) -> Tuple[str, ...]:
        """Non-fatal problems worth showing alongside the result."""
        items = [str(error) for error in self.scan_errors]
        if self.reconciliation is not None:
            items.extend(str(w) for w in self.reconciliation.warnings)
        return tuple(items)


def resolve_root(paths: Sequence[str], cwd: Optional[str] = None) -> str:
    """Pick the workspace root from the paths a user pointed at.

    Only a single directory is used as is; a single file, several paths
    or none all fall back to the working directory.
    """
    fallback = os.path.abspath(cwd or os.getcwd())
    if len(paths) != 1:
        return fallback
    path = os.path.abspath(paths[0])
    if os.path.isdir(path):
        return path
    return fallback


def display_root(root_path: str, cwd: Optional[str] = None) -> str:
    """Root path as shown to the user, relative to cwd when inside it."""
    rel = PathUtils.relative_to(cwd or os.getcwd(), root_path)
    if rel is None:
        return root_path
    return rel or "."


def success_message(registered: int, root_label: str, criteria: str) -> str:
    plural = "s" if registered != 1 else ""
    return f"Added {registered} file{plural} from '{root_label}' that match your criteria:\n \"{criteria}\""


class SmartSelectPipeline:
    """Runs smart selection invocations against one adapter and registrar.

    The adapter and configuration are read-only; every run builds fresh
    scan, request and reconciliation state, so runs never share results.
    """

    def __init__(
        self,
        adapter: BaseLLMAdapter,
        config: SelectionConfig,
        registrar: ContextRegistrar,
        telemetry: Optional[TelemetrySink] = None,
        token_counter: Optional[TokenCounter] = None,
        display_max_length: int = DISPLAY_MAX_LENGTH,
    ):
        self.adapter = adapter
        self.config = config
        self.registrar = registrar
        self.telemetry = telemetry or LoggingTelemetry()
        self.prompt_builder = PromptBuilder(config, token_counter)
        self.display_max_length = display_max_length

    async def run(
        self,
        criteria: str,
        root_path: str,
        token: Optional[CancellationToken] = None,
        progress: Optional[ProgressReporter] = None,
    ) -> SmartSelectOutcome:
        """
        Select and register the files under root_path matching criteria.

        Network and parse failures produce a FAILED outcome naming the
        stage; cancellation produces ABORTED. Neither is raised.
        """
        context = set_context(invocation_id=uuid.uuid4().hex[:8], provider=self.adapter.provider_name)
        try:
            return await self._run(
                criteria, os.path.abspath(root_path), token or NONE, progress or NullProgress()
            )
        finally:
            reset_context(context)

    async def _run(self, criteria: str, root_path: str, token: CancellationToken,
                   progress: ProgressReporter) -> SmartSelectOutcome:
        # Scan
        progress.report(SCAN_WEIGHT, "Scanning workspace files...")
        scanner = WorkspaceScanner(self.config)
        scan_result = await asyncio.to_thread(scanner.scan, root_path, token)
        if scan_result.cancelled or token.is_cancelled:
            return self._aborted(PipelineStage.SCAN, criteria, root_path, scan_result)
        if scan_result.over_threshold:
            logger.warning(
                f"Workspace has {scan_result.file_count} files, more than the threshold of "
                f"{self.config.file_threshold}; the selection may be slow or costly"
            )

        # Prompt
        progress.report(PROMPT_WEIGHT, f"Creating file selection query for {scan_result.file_count} files...")
        request = self.prompt_builder.build_messages(criteria, root_path, scan_result=scan_result)
        if token.is_cancelled:
            return self._aborted(PipelineStage.PROMPT, criteria, root_path, scan_result)

        # Request
        progress.report(REQUEST_WEIGHT, "Getting AI recommendations...")
        try:
            response = await self.adapter.complete(request)
        except NetworkError as e:
            return self._failed(PipelineStage.REQUEST, e, criteria, root_path, scan_result)
        if token.is_cancelled:
            return self._aborted(PipelineStage.REQUEST, criteria, root_path, scan_result)

        # Parse
        progress.report(PARSE_WEIGHT, "Processing selected files...")
        try:
            selected = parse_llm_response(response.text)
        except ParseError as e:
            return self._failed(PipelineStage.PARSE, e, criteria, root_path, scan_result,
                                raw_response=e.raw_text)

        # Reconcile
        reconciliation = PathReconciler(root_path).reconcile(selected)

        # Register
        progress.report(REGISTER_WEIGHT, "Adding files to context...")
        registered = await register_all(self.registrar, reconciliation.matched)

        self.telemetry.track_event(ADD_SMART_SELECTION, {
            "fileCount": registered,
            "folderCount": reconciliation.distinct_folder_count,
        })

        tree_text = format_file_tree(
            root_path, scan_result.root, reconciliation.matched, self.display_max_length
        )
        logger.info(f"Registered {registered}/{len(reconciliation.matched)} selected files", extra={
            "selected": len(selected),
            "unmatched": len(reconciliation.unmatched_inputs),
        })
        return SmartSelectOutcome(
            status=OutcomeStatus.SUCCESS,
            criteria=criteria,
            root_path=root_path,
            message=success_message(registered, display_root(root_path), criteria),
            registered_count=registered,
            total_files=scan_result.file_count,
            folder_count=reconciliation.distinct_folder_count,
            tree_text=tree_text,
            reconciliation=reconciliation,
            scan_errors=scan_result.errors,
            over_threshold=scan_result.over_threshold,
            raw_response=response.text,
        )

    def _aborted(self, stage: PipelineStage, criteria: str, root_path: str,
                 scan_result: ScanResult) -> SmartSelectOutcome:
        logger.info(f"Smart selection cancelled during {stage.value}")
        return SmartSelectOutcome(
            status=OutcomeStatus.ABORTED,
            criteria=criteria,
            root_path=root_path,
            message=f"Smart selection cancelled during {stage.value}",
            failed_stage=stage,
            total_files=scan_result.file_count,
            scan_errors=scan_result.errors,
            over_threshold=scan_result.over_threshold,
        )

    def _failed(self, stage: PipelineStage, error: SmartAddError, criteria: str, root_path: str,
                scan_result: ScanResult, raw_response: Optional[str] = None) -> SmartSelectOutcome:
        logger.error(f"Smart selection failed during {stage.value}: {error}", extra={"stage": stage.value})
        return SmartSelectOutcome(
            status=OutcomeStatus.FAILED,
            criteria=criteria,
            root_path=root_path,
            message=f"Smart selection failed during {stage.value}: {error}",
            failed_stage=stage,
            error=error,
            total_files=scan_result.file_count,
            scan_errors=scan_result.errors,
            over_threshold=scan_result.over_threshold,
            raw_response=raw_response,
        )
