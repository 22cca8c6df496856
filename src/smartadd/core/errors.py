"""Exception hierarchy for the smart selection pipeline."""

from enum import Enum
from typing import Optional


class PipelineStage(str, Enum):
    """Stages of a smart selection run, in execution order."""
    SCAN = "scan"
    PROMPT = "prompt"
    REQUEST = "request"
    PARSE = "parse"
    RECONCILE = "reconcile"
    REGISTER = "register"


class SmartAddError(Exception):
    """Base class for smartadd errors."""

    def __init__(self, message: str, stage: Optional[PipelineStage] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage


class ScanError(SmartAddError):
    """An individual workspace entry could not be read.

    Collected on the scan result rather than raised; a scan never fails
    because of a single entry.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}", stage=PipelineStage.SCAN)
        self.path = path
        self.reason = reason


class NetworkError(SmartAddError):
    """A provider call failed (timeout, connection, rate limit, auth, HTTP error)."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    HTTP = "http"
    UNSUPPORTED = "unsupported"

    def __init__(self, message: str, provider: str, kind: str = "http",
                 status_code: Optional[int] = None):
        super().__init__(message, stage=PipelineStage.REQUEST)
        self.provider = provider
        self.kind = kind
        self.status_code = status_code

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"


class ParseError(SmartAddError):
    """The model response did not contain a usable list of file paths."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message, stage=PipelineStage.PARSE)
        self.raw_text = raw_text
