"""voicerelay - ElevenLabs TTS relay with live fitness event fan-out."""

__version__ = "0.1.0"
__all__ = ["create_app"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "create_app":
        from .server.app import create_app

        return create_app
    raise AttributeError(f"module 'voicerelay' has no attribute {name!r}")
