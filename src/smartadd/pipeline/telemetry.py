"""Telemetry handles passed explicitly into the pipeline."""

from typing import Any, Dict, List, Protocol, Tuple

from ..utils.logging_config import get_logger

logger = get_logger(__name__)

ADD_FILE = "add_file"
ADD_FOLDER = "add_folder"
ADD_SELECTION = "add_selection"
ADD_SMART_SELECTION = "add_smart_selection"


class TelemetrySink(Protocol):
    """Receives named events with flat properties."""

    def track_event(self, name: str, properties: Dict[str, Any]) -> None:
        ...


class LoggingTelemetry:
    """Sink that only writes events to the log."""

    def track_event(self, name: str, properties: Dict[str, Any]) -> None:
        logger.info(f"telemetry: {name}", extra={"event": name, **properties})


class RecordingTelemetry:
    """Sink that keeps events in memory, for inspection after a run."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def track_event(self, name: str, properties: Dict[str, Any]) -> None:
        self.events.append((name, dict(properties)))
