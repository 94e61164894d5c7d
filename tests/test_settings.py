"""
Tests for Settings.
"""

import pytest
from pydantic import ValidationError

from deploy_web.core.config import Settings


def test_defaults():
    settings = Settings()

    assert settings.activation_id is None
    assert settings.api_host is None
    assert settings.api_key is None
    assert settings.wskdeploy_path == "wskdeploy"
    assert settings.deploy_timeout_seconds is None
    assert settings.preinstalled_root.name == "preInstalled"
    assert settings.log_format == "json"


def test_reads_openwhisk_environment(monkeypatch):
    monkeypatch.setenv("__OW_ACTIVATION_ID", "act-9")
    monkeypatch.setenv("__OW_API_HOST", "https://ow.example.com")
    monkeypatch.setenv("__OW_API_KEY", "key-9")

    settings = Settings()

    assert settings.activation_id == "act-9"
    assert settings.api_host == "https://ow.example.com"
    assert settings.api_key == "key-9"


def test_storage_and_tool_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("PREINSTALLED_DIR", str(tmp_path / "pre"))
    monkeypatch.setenv("SCRATCH_DIR", str(tmp_path / "tmp"))
    monkeypatch.setenv("WSKDEPLOY_PATH", "/opt/wskdeploy")
    monkeypatch.setenv("DEPLOY_TIMEOUT_SECONDS", "90")

    settings = Settings()

    assert settings.preinstalled_root == tmp_path / "pre"
    assert settings.scratch_root == tmp_path / "tmp"
    assert settings.wskdeploy_path == "/opt/wskdeploy"
    assert settings.deploy_timeout_seconds == 90


def test_empty_timeout_means_no_limit(monkeypatch):
    monkeypatch.setenv("DEPLOY_TIMEOUT_SECONDS", "")

    assert Settings().deploy_timeout_seconds is None


def test_invalid_log_format():
    with pytest.raises(ValidationError):
        Settings(log_format="xml")
