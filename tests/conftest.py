"""Pytest configuration and shared fixtures for har-stitch tests."""

import json

import pytest

import har_stitch.io.logging_setup


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep settings inside the test's tmp_path and logging handlers detached."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    har_stitch.io.logging_setup.reset()
    yield
    har_stitch.io.logging_setup.reset()


@pytest.fixture
def write_settings(tmp_path):
    """Write a settings.json under the isolated XDG_CONFIG_HOME."""
    def _write(data):
        path = tmp_path / "config" / "har-stitch" / "settings.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
