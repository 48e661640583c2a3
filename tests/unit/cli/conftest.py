"""Fixtures for CLI tests: isolated config and cwd, fake provider key."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolated_cli(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "docchat.config._GLOBAL_CONFIG_PATH", tmp_path / "home" / ".docchat" / "config.yaml"
    )
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
