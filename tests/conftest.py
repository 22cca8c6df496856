import pytest
import tempfile
import shutil
from pathlib import Path
from typing import List, Optional

from smartadd.ai.adapter.base import BaseLLMAdapter
from smartadd.ai.config import ProviderConfig
from smartadd.ai.models.common import CompletionRequest, CompletionResponse
from smartadd.core.models import SelectionConfig
from smartadd.utils.cancellation import CancellationToken


@pytest.fixture
def temp_workspace():
    """Create a temporary directory for test files."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def sample_repo(temp_workspace):
    """Create a sample workspace structure for testing."""
    repo_root = temp_workspace / "proj"
    repo_root.mkdir()

    # Create directory structure
    (repo_root / "src").mkdir()
    (repo_root / "src" / "utils").mkdir()
    (repo_root / "tests").mkdir()
    (repo_root / "docs").mkdir()
    (repo_root / "build").mkdir()
    (repo_root / ".git").mkdir()
    (repo_root / "node_modules").mkdir()
    (repo_root / "node_modules" / "lib").mkdir()

    # Create files
    (repo_root / "README.md").write_text("# Sample Workspace\n")
    (repo_root / "src" / "a.ts").write_text("export const a = 1;\n")
    (repo_root / "src" / "b.exe").write_bytes(b"MZ\x00\x00")
    (repo_root / "src" / "utils" / "helpers.ts").write_text("export function helper() { return 42; }\n")
    (repo_root / "tests" / "a.test.ts").write_text("test('a', () => {});\n")
    (repo_root / "docs" / "guide.md").write_text("# Guide\n")
    (repo_root / "build" / "app.bin").write_bytes(b"\x00\x01\x02")
    (repo_root / ".git" / "config").write_text("[core]\n    repositoryformatversion = 0")
    (repo_root / "node_modules" / "x.ts").write_text("export {};\n")
    (repo_root / "node_modules" / "lib" / "index.js").write_text("module.exports = {};\n")

    return repo_root


@pytest.fixture
def selection_config():
    """Default exclusion rules, independent of the environment."""
    return SelectionConfig(
        excluded_extensions={".exe", ".bin"},
        excluded_folders={"node_modules", ".git"},
        file_threshold=15,
    )


@pytest.fixture
def provider_config():
    return ProviderConfig(provider="openai", api_key="sk-test-key")


class FakeAdapter(BaseLLMAdapter):
    """Adapter returning a canned response, recording every request."""

    def __init__(self, config: ProviderConfig, response_text: str = "[]",
                 error: Optional[Exception] = None, models: Optional[List[str]] = None):
        super().__init__(config)
        self.response_text = response_text
        self.error = error
        self.models = models or []
        self.requests: List[CompletionRequest] = []

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return CompletionResponse(text=self.response_text, model=self.model)

    async def fetch_models(self) -> List[str]:
        if self.error is not None:
            raise self.error
        return sorted(self.models)


@pytest.fixture
def make_adapter(provider_config):
    """Factory for fake adapters with a canned response or error."""
    def _make(response_text: str = "[]", error: Optional[Exception] = None,
              models: Optional[List[str]] = None) -> FakeAdapter:
        return FakeAdapter(provider_config, response_text, error, models)
    return _make


class TripwireToken(CancellationToken):
    """Cancels itself on the N-th check, simulating a mid-scan Ctrl-C."""

    def __init__(self, trip_at: int):
        super().__init__()
        self.trip_at = trip_at
        self.checks = 0

    @property
    def is_cancelled(self) -> bool:
        self.checks += 1
        if self.checks >= self.trip_at:
            self.cancel()
        return super().is_cancelled


@pytest.fixture
def tripwire():
    return TripwireToken


@pytest.fixture
def large_workspace(temp_workspace):
    """10,000 files spread over 100 directories."""
    root = temp_workspace / "large"
    root.mkdir()
    for d in range(100):
        folder = root / f"dir_{d:03d}"
        folder.mkdir()
        for f in range(100):
            (folder / f"file_{f:03d}.txt").touch()
    return root
