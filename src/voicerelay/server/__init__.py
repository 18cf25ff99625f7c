"""HTTP and WebSocket surface for voicerelay."""

from .app import create_app
from .ranges import RangeNotSatisfiable, byte_range_response, parse_range

__all__ = ["RangeNotSatisfiable", "byte_range_response", "create_app", "parse_range"]
