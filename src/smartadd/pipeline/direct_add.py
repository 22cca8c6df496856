"""Adding files and folders as context directly, without the model."""

import asyncio
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.errors import ScanError
from ..core.models import SelectionConfig
from ..core.scanner import WorkspaceScanner
from ..utils.cancellation import CancellationToken, NONE
from ..utils.logging_config import get_logger
from .registrar import ContextRegistrar, register_all
from .telemetry import ADD_FILE, ADD_FOLDER, ADD_SELECTION, LoggingTelemetry, TelemetrySink

logger = get_logger(__name__)


@dataclass(frozen=True)
class CollectedFiles:
    """Files gathered from a set of user-chosen paths."""

    file_paths: Tuple[str, ...]
    folder_count: int
    errors: Tuple[ScanError, ...] = ()
    cancelled: bool = False


@dataclass(frozen=True)
class DirectAddOutcome:
    event: str
    registered_count: int
    file_count: int
    folder_count: int
    recursive: bool
    errors: Tuple[ScanError, ...] = ()
    cancelled: bool = False

    @property
    def headline(self) -> str:
        return f"{self.registered_count}/{self.file_count} files successfully added"

    def warnings(self) -> Tuple[str, ...]:
        return tuple(str(error) for error in self.errors)


def collect_files(paths: Sequence[str], config: SelectionConfig, recursive: bool,
                  token: Optional[CancellationToken] = None) -> CollectedFiles:
    """
    Expand files and folders into the files they stand for.

    Folders are listed with the exclusion rules, descending into
    subfolders only when recursive. Files named directly are kept as
    given. The folder count is the number of distinct folders the files
    were taken from or walked through.
    """
    token = token or NONE
    files: Dict[str, None] = {}
    folders: Dict[str, None] = {}
    errors: List[ScanError] = []
    scanner = WorkspaceScanner(config)

    for raw_path in paths:
        path = os.path.abspath(raw_path)
        if os.path.isfile(path):
            files.setdefault(path)
            folders.setdefault(os.path.dirname(path))
            continue
        if not os.path.isdir(path):
            errors.append(ScanError(path, "not found"))
            logger.warning(f"Skipping {path}: not found")
            continue

        result = scanner.scan(path, token, recursive=recursive)
        errors.extend(result.errors)
        if result.cancelled:
            return CollectedFiles(tuple(files), len(folders), tuple(errors), cancelled=True)
        for node in result.root.iter_directories():
            folders.setdefault(node.path)
        for file_path in result.file_paths():
            files.setdefault(file_path)

    return CollectedFiles(tuple(files), len(folders), tuple(errors))


class DirectAdder:
    """Registers user-chosen files and folders and reports one telemetry event per add."""

    def __init__(self, config: SelectionConfig, registrar: ContextRegistrar,
                 telemetry: Optional[TelemetrySink] = None):
        self.config = config
        self.registrar = registrar
        self.telemetry = telemetry or LoggingTelemetry()

    async def add_files(self, file_paths: Sequence[str]) -> DirectAddOutcome:
        """Add individual files."""
        for path in file_paths:
            if os.path.isdir(path):
                raise ValueError(f"Path is a directory, not a file: {path}")
        return await self._add(ADD_FILE, file_paths, recursive=False, token=NONE)

    async def add_folder(self, folder_path: str, recursive: bool = True,
                         token: Optional[CancellationToken] = None) -> DirectAddOutcome:
        """Add the files in one folder, by default including its subfolders."""
        if not os.path.isdir(folder_path):
            raise ValueError(f"Path is not a directory: {folder_path}")
        return await self._add(ADD_FOLDER, [folder_path], recursive, token or NONE)

    async def add_selection(self, paths: Sequence[str], recursive: bool = False,
                            token: Optional[CancellationToken] = None) -> DirectAddOutcome:
        """Add a mixed selection of files and folders."""
        return await self._add(ADD_SELECTION, paths, recursive, token or NONE)

    async def _add(self, event: str, paths: Sequence[str], recursive: bool,
                   token: CancellationToken) -> DirectAddOutcome:
        collected = await asyncio.to_thread(collect_files, paths, self.config, recursive, token)
        if collected.cancelled or token.is_cancelled:
            logger.info(f"{event} cancelled while listing files")
            return DirectAddOutcome(
                event=event, registered_count=0, file_count=len(collected.file_paths),
                folder_count=collected.folder_count, recursive=recursive,
                errors=collected.errors, cancelled=True,
            )

        registered = await register_all(self.registrar, collected.file_paths)

        properties = {"fileCount": registered, "folderCount": collected.folder_count}
        if event != ADD_FILE:
            properties["recursive"] = recursive
        self.telemetry.track_event(event, properties)

        logger.info(f"Registered {registered}/{len(collected.file_paths)} files", extra={"event": event})
        return DirectAddOutcome(
            event=event,
            registered_count=registered,
            file_count=len(collected.file_paths),
            folder_count=collected.folder_count,
            recursive=recursive,
            errors=collected.errors,
        )
