"""Smart selection controller and its collaborators."""

from .direct_add import DirectAddOutcome, DirectAdder, collect_files
from .registrar import ContextBundleRegistrar, ContextRegistrar, register_all
from .smart_select import (
    NullProgress,
    OutcomeStatus,
    SmartSelectOutcome,
    SmartSelectPipeline,
    resolve_root,
)
from .telemetry import (
    ADD_FILE,
    ADD_FOLDER,
    ADD_SELECTION,
    ADD_SMART_SELECTION,
    LoggingTelemetry,
    RecordingTelemetry,
    TelemetrySink,
)

__all__ = [
    "DirectAddOutcome",
    "DirectAdder",
    "collect_files",
    "ContextBundleRegistrar",
    "ContextRegistrar",
    "register_all",
    "NullProgress",
    "OutcomeStatus",
    "SmartSelectOutcome",
    "SmartSelectPipeline",
    "resolve_root",
    "ADD_FILE",
    "ADD_FOLDER",
    "ADD_SELECTION",
    "ADD_SMART_SELECTION",
    "LoggingTelemetry",
    "RecordingTelemetry",
    "TelemetrySink",
]
