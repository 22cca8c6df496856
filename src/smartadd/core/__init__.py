"""Core components for smartadd."""

from .errors import NetworkError, ParseError, PipelineStage, ScanError, SmartAddError
from .file_analyzer import FileAnalyzer
from .models import (
    ReconciliationResult,
    ReconciliationWarning,
    ScanResult,
    SelectionConfig,
    TreeNode,
)
from .tokenizer import TokenCounter

__all__ = [
    "SelectionConfig",
    "TreeNode",
    "ScanResult",
    "ReconciliationResult",
    "ReconciliationWarning",
    "SmartAddError",
    "ScanError",
    "NetworkError",
    "ParseError",
    "PipelineStage",
    "FileAnalyzer",
    "TokenCounter",
]
