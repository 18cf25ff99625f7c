"""Pytest configuration and fixtures for voicerelay tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from voicerelay.config import RelayConfig, build_config


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path) -> None:
    """Keep real API keys and user config files out of every test."""
    for name in (
        "ELEVEN_API_KEY",
        "ELEVENLABS_API_KEY",
        "VITAL_API_KEY",
        "PORT",
        "HOST",
        "LOG_LEVEL",
        "ELEVEN_VOICE_ID",
        "ELEVEN_MODEL_ID",
        "VITAL_BASE_URL",
        "CACHE_MAX_ENTRIES",
        "CACHE_COALESCE",
        "ELEVEN_TIMEOUT",
        "VITAL_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VOICERELAY_CONFIG", str(tmp_path / "missing.toml"))
    monkeypatch.setattr("voicerelay.config._cached_config", None)


@pytest.fixture
def relay_config() -> RelayConfig:
    """Default configuration with no file and no environment overrides."""
    return build_config({}, env={})
