"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Provide default settings for all tests."""
    monkeypatch.setenv("FIREWALL_LOG_JSON", "false")
    monkeypatch.setenv("FIREWALL_LOG_LEVEL", "debug")
    monkeypatch.delenv("FIREWALL_OPTIONS_FILE", raising=False)

    # Reset cached settings
    import http_firewall.config.loader as loader
    loader._settings = None
    yield
    loader._settings = None


@pytest.fixture
def write_options(tmp_path, monkeypatch):
    """Write a YAML options file and point FIREWALL_OPTIONS_FILE at it."""

    def _write(options: dict) -> Path:
        path = tmp_path / "firewall.yaml"
        path.write_text(yaml.safe_dump(options))
        monkeypatch.setenv("FIREWALL_OPTIONS_FILE", str(path))
        return path

    return _write


@pytest.fixture
def client():
    """Create a test client for the demo app (lifespan builds the pipeline)."""
    import http_firewall.main as main_module
    main_module._pipeline = None

    from http_firewall.main import app
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
