"""
Pytest configuration and fixtures for deploy-web tests.
"""

from pathlib import Path

import pytest

from deploy_web.core.models import ActivationContext
from deploy_web.deploy.locator import RepoLocator
from deploy_web.deploy.pipeline import DeployPipeline


OW_ENV_VARS = ("__OW_ACTIVATION_ID", "__OW_API_HOST", "__OW_API_KEY", "PREINSTALLED_DIR", "SCRATCH_DIR")


@pytest.fixture(autouse=True)
def clean_activation_env(monkeypatch):
    """Keep the host's OpenWhisk variables from leaking into tests."""
    for name in OW_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class RecordingFetcher:
    """Fetcher double: records calls and creates the target dir unless told to fail."""

    def __init__(self, error: Exception = None):
        self.error = error
        self.calls = []

    def fetch(self, git_url, dest_path):
        self.calls.append((git_url, Path(dest_path)))
        if self.error is not None:
            raise self.error
        Path(dest_path).mkdir(parents=True, exist_ok=True)
        return Path(dest_path)


class RecordingInvoker:
    """Deploy tool double."""

    def __init__(self, result=None, error: Exception = None):
        self.result = {"deployed": True} if result is None else result
        self.error = error
        self.calls = []

    def invoke(self, descriptor):
        self.calls.append(descriptor)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def preinstalled_root(tmp_path: Path) -> Path:
    return tmp_path / "preInstalled"


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    return tmp_path / "tmp"


@pytest.fixture
def fetcher() -> RecordingFetcher:
    return RecordingFetcher()


@pytest.fixture
def invoker() -> RecordingInvoker:
    return RecordingInvoker()


@pytest.fixture
def pipeline(preinstalled_root, scratch_root, fetcher, invoker) -> DeployPipeline:
    return DeployPipeline(RepoLocator(preinstalled_root, scratch_root), fetcher, invoker)


@pytest.fixture
def context() -> ActivationContext:
    return ActivationContext(activation_id="act-123", api_host="https://ow.example.com", api_key="env-key")
