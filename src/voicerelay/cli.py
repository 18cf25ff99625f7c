"""Typer CLI definition for voicerelay."""

import asyncio
import logging

import typer
import uvicorn

from .config import RelayConfig, config_path, generate_config, load_config
from .providers import ProviderRegistry
from .providers.base import TTSProvider
from .relay.vital import VitalClient
from .tts.errors import TTSAPIError, TTSAuthError

app = typer.Typer(help="ElevenLabs TTS relay with live fitness event fan-out")

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_provider(config: RelayConfig) -> TTSProvider:
    """Instantiate the configured synthesis provider.

    Raises:
        KeyError: If the provider name is not registered
        TTSAuthError: If no API key is available
    """
    provider_class = ProviderRegistry.get(config.elevenlabs.provider)
    return provider_class(
        api_key=config.elevenlabs.api_key, timeout=config.elevenlabs.timeout
    )


def build_vital(config: RelayConfig) -> VitalClient | None:
    """Return a Vital client, or None when no API key is configured."""
    if not config.vital.api_key:
        logger.info("VITAL_API_KEY not set, link token route disabled")
        return None
    return VitalClient(
        api_key=config.vital.api_key,
        base_url=config.vital.base_url,
        timeout=config.vital.timeout,
    )


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (from config if omitted)"),
    port: int | None = typer.Option(None, "-p", "--port", help="Port (from config if omitted)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Run the relay server."""
    from .server.app import create_app

    config = load_config()
    level = "DEBUG" if debug else config.server.log_level
    configure_logging(level)

    try:
        provider = build_provider(config)
    except (KeyError, TTSAuthError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    application = create_app(config, provider, vital=build_vital(config))

    bind_host = host or config.server.host
    bind_port = port or config.server.port
    logger.info(f"✓ TTS server running on {bind_host}:{bind_port}")
    uvicorn.run(application, host=bind_host, port=bind_port, log_level=level.lower())


@app.command()
def voices(
    simple: bool = typer.Option(False, "--simple", help="Only print voice IDs"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """List voices available from the synthesis provider."""
    if debug:
        configure_logging("DEBUG")

    config = load_config()
    try:
        provider = build_provider(config)
        voice_list = asyncio.run(provider.list_voices())
    except (KeyError, TTSAuthError, TTSAPIError) as e:
        if debug:
            typer.echo(f"Debug - Failed to list voices: {e!r}", err=True)
        else:
            typer.echo(f"Error: Failed to list voices: {e}", err=True)
        raise typer.Exit(1) from None

    for voice in voice_list:
        typer.echo(voice.voice_id if simple else f"{voice.name}: {voice.voice_id}")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write the default config file."""
    path = config_path()
    if path.exists() and not force:
        typer.echo(f"Config already exists at {path} (use --force to overwrite)")
        raise typer.Exit(1)
    generate_config(path)
    typer.echo(f"Wrote {path}")
