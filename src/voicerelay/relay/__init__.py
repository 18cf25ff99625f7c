"""Live event relay: webhook normalization and per-user connection fan-out."""

from .events import RECOGNIZED_EVENT_TYPES, DispatchResult, EventRelay, normalize_metrics
from .registry import ConnectionRegistry
from .vital import VitalAPIError, VitalClient, VitalError, VitalTimeoutError

__all__ = [
    "RECOGNIZED_EVENT_TYPES",
    "ConnectionRegistry",
    "DispatchResult",
    "EventRelay",
    "VitalAPIError",
    "VitalClient",
    "VitalError",
    "VitalTimeoutError",
    "normalize_metrics",
]
