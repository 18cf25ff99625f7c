"""Webhook event normalization and dispatch to live connections."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)

RECOGNIZED_EVENT_TYPES = frozenset(
    {
        "daily.data.workouts.created",
        "daily.data.activity.created",
        "historical.data.workouts.created",
        "historical.data.activity.created",
    }
)

MESSAGE_TYPE = "workout"


def _first(data: Mapping[str, Any], *names: str) -> Any:
    # Falsy values fall through to the next name, as in `a or b`
    for name in names:
        value = data.get(name)
        if value:
            return value
    return None


def normalize_metrics(data: Mapping[str, Any]) -> dict[str, Any]:
    """Extract the metric record pushed to clients from a webhook payload.

    Args:
        data: The ``data`` object of a workout or activity event

    Returns:
        Dict with heart_rate, pace_sec_per_km, distance_km, elapsed_time_sec,
        calories and start_time; unavailable metrics are None
    """
    distance = data.get("distance")
    moving_time = data.get("moving_time")

    pace = None
    if moving_time is not None and distance is not None and distance != 0:
        pace = moving_time / (distance / 1000)

    return {
        "heart_rate": _first(data, "average_hr", "hr_avg"),
        "pace_sec_per_km": pace,
        "distance_km": distance / 1000 if distance is not None else None,
        "elapsed_time_sec": _first(data, "active_duration", "duration"),
        "calories": _first(data, "calories_total", "active_calories"),
        "start_time": _first(data, "calendar_date"),
    }


def target_user_id(envelope: Mapping[str, Any]) -> str | None:
    """Find the client identifier an event is addressed to.

    Looks for ``client_user_id`` then ``user_id`` on the envelope first and
    on its ``data`` object second.
    """
    data = envelope.get("data")
    scopes = [envelope, data] if isinstance(data, Mapping) else [envelope]
    for scope in scopes:
        for name in ("client_user_id", "user_id"):
            value = scope.get(name)
            if value:
                return str(value)
    return None


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of relaying one webhook event."""

    event_type: str | None
    recognized: bool
    user_id: str | None = None
    delivered: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "recognized": self.recognized,
            "user_id": self.user_id,
            "delivered": self.delivered,
        }


class EventRelay:
    """Turns webhook envelopes into metric messages for live connections.

    Unrecognized event types are accepted without action so senders that
    retry on non-2xx responses do not retry forever.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    async def dispatch(self, envelope: Any) -> DispatchResult:
        """Relay one webhook envelope.

        Args:
            envelope: Decoded webhook JSON body

        Returns:
            DispatchResult describing what happened
        """
        if not isinstance(envelope, Mapping):
            logger.info("Ignoring webhook with non-object body")
            return DispatchResult(event_type=None, recognized=False)

        event_type = envelope.get("event_type")
        if not isinstance(event_type, str) or event_type not in RECOGNIZED_EVENT_TYPES:
            logger.info(f"Ignoring webhook event {event_type!r}")
            return DispatchResult(event_type=event_type, recognized=False)

        data = envelope.get("data")
        if not isinstance(data, Mapping):
            data = {}

        user_id = target_user_id(envelope)
        if user_id is None:
            logger.warning(f"Webhook {event_type} has no user identifier, dropping")
            return DispatchResult(event_type=event_type, recognized=True)

        message = {
            "type": MESSAGE_TYPE,
            "event_type": event_type,
            "user_id": user_id,
            "metrics": normalize_metrics(data),
        }
        delivered = await self.registry.send(user_id, message)
        logger.info(
            f"Webhook {event_type} for {user_id}: "
            f"{'delivered' if delivered else 'no live connection'}"
        )
        return DispatchResult(
            event_type=event_type,
            recognized=True,
            user_id=user_id,
            delivered=delivered,
        )
