"""Configuration management for voicerelay.

Loads configuration from $VOICERELAY_CONFIG or ~/.config/voicerelay/config.toml.
Priority chain: CLI flags > env vars > config file > built-in defaults.
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_DIR = Path.home() / ".config" / "voicerelay"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
DEFAULT_MODEL_ID = "eleven_multilingual_v2"
DEFAULT_CACHE_ENTRIES = 150
DEFAULT_VITAL_BASE_URL = "https://api.sandbox.tryvital.io"

DEFAULT_CONFIG = """\
# voicerelay configuration

[server]
# Bind address: "0.0.0.0" = all interfaces, "127.0.0.1" = localhost only
host = "0.0.0.0"
port = 5000
log_level = "INFO"

[elevenlabs]
provider = "elevenlabs"
voice_id = "21m00Tcm4TlvDq8ikWAM"
model_id = "eleven_multilingual_v2"
stability = 0.4
similarity_boost = 0.85
style = 0.0
use_speaker_boost = true
# Seconds before an upstream call is abandoned
timeout = 30.0

[cache]
# Maximum number of synthesized clips kept in memory
max_entries = 150
# Share one upstream call between concurrent identical requests
coalesce = true

[vital]
base_url = "https://api.sandbox.tryvital.io"
timeout = 30.0

# API keys are read from environment variables, not this file:
#   ELEVEN_API_KEY  - ElevenLabs synthesis (ELEVENLABS_API_KEY also accepted)
#   VITAL_API_KEY   - Vital link token issuance
"""


@dataclass(frozen=True)
class ServerConfig:
    """HTTP listener configuration."""

    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"


@dataclass(frozen=True)
class ElevenLabsConfig:
    """Synthesis provider configuration and per-request defaults."""

    api_key: str | None = None
    provider: str = "elevenlabs"
    voice_id: str = DEFAULT_VOICE_ID
    model_id: str = DEFAULT_MODEL_ID
    stability: float = 0.4
    similarity_boost: float = 0.85
    style: float = 0.0
    use_speaker_boost: bool = True
    timeout: float = 30.0


@dataclass(frozen=True)
class CacheConfig:
    """In-memory audio cache configuration."""

    max_entries: int = DEFAULT_CACHE_ENTRIES
    coalesce: bool = True


@dataclass(frozen=True)
class VitalConfig:
    """Vital API configuration."""

    api_key: str | None = None
    base_url: str = DEFAULT_VITAL_BASE_URL
    timeout: float = 30.0


@dataclass(frozen=True)
class RelayConfig:
    """Top-level voicerelay configuration."""

    server: ServerConfig
    elevenlabs: ElevenLabsConfig
    cache: CacheConfig
    vital: VitalConfig


_cached_config: RelayConfig | None = None


def generate_config(path: Path | None = None) -> Path:
    """Write the default config file and return its path."""
    target = path or config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(DEFAULT_CONFIG)
    return target


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def config_path() -> Path:
    """Return the config file location, honouring $VOICERELAY_CONFIG."""
    override = os.getenv("VOICERELAY_CONFIG")
    return Path(override) if override else CONFIG_PATH


def _read_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f)


def build_config(
    data: Mapping[str, Any], env: Mapping[str, str] | None = None
) -> RelayConfig:
    """Build a RelayConfig from parsed TOML data and environment overrides.

    Args:
        data: Parsed config file contents (may be empty)
        env: Environment mapping, defaults to os.environ

    Returns:
        Fully resolved configuration

    Raises:
        ValueError: If a numeric value cannot be parsed
    """
    env = os.environ if env is None else env

    server = data.get("server", {})
    eleven = data.get("elevenlabs", {})
    cache = data.get("cache", {})
    vital = data.get("vital", {})

    coalesce = env.get("CACHE_COALESCE")

    return RelayConfig(
        server=ServerConfig(
            host=env.get("HOST", server.get("host", ServerConfig.host)),
            port=int(env.get("PORT", server.get("port", ServerConfig.port))),
            log_level=env.get(
                "LOG_LEVEL", server.get("log_level", ServerConfig.log_level)
            ).upper(),
        ),
        elevenlabs=ElevenLabsConfig(
            api_key=env.get("ELEVEN_API_KEY") or env.get("ELEVENLABS_API_KEY"),
            provider=eleven.get("provider", ElevenLabsConfig.provider),
            voice_id=env.get(
                "ELEVEN_VOICE_ID", eleven.get("voice_id", DEFAULT_VOICE_ID)
            ),
            model_id=env.get(
                "ELEVEN_MODEL_ID", eleven.get("model_id", DEFAULT_MODEL_ID)
            ),
            stability=float(eleven.get("stability", ElevenLabsConfig.stability)),
            similarity_boost=float(
                eleven.get("similarity_boost", ElevenLabsConfig.similarity_boost)
            ),
            style=float(eleven.get("style", ElevenLabsConfig.style)),
            use_speaker_boost=bool(
                eleven.get("use_speaker_boost", ElevenLabsConfig.use_speaker_boost)
            ),
            timeout=float(
                env.get("ELEVEN_TIMEOUT", eleven.get("timeout", ElevenLabsConfig.timeout))
            ),
        ),
        cache=CacheConfig(
            max_entries=int(
                env.get(
                    "CACHE_MAX_ENTRIES",
                    cache.get("max_entries", DEFAULT_CACHE_ENTRIES),
                )
            ),
            coalesce=_env_bool(coalesce)
            if coalesce is not None
            else bool(cache.get("coalesce", CacheConfig.coalesce)),
        ),
        vital=VitalConfig(
            api_key=env.get("VITAL_API_KEY"),
            base_url=env.get(
                "VITAL_BASE_URL", vital.get("base_url", DEFAULT_VITAL_BASE_URL)
            ),
            timeout=float(
                env.get("VITAL_TIMEOUT", vital.get("timeout", VitalConfig.timeout))
            ),
        ),
    )


def load_config(refresh: bool = False) -> RelayConfig:
    """Load configuration from the config file with env var overrides.

    A missing config file is not an error: built-in defaults apply.

    Args:
        refresh: Re-read the file and environment instead of using the
            process-wide cached copy.

    Returns:
        Loaded RelayConfig.
    """
    global _cached_config
    if _cached_config is not None and not refresh:
        return _cached_config

    _cached_config = build_config(_read_file(config_path()))
    return _cached_config
