"""Centralized event payload shaping for wire serialization.

Defines the canonical dict shape for ServiceEvent payloads so every
NotificationBus implementation serializes events the same way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from game.logic.events import ServiceEvent


def service_event_payload(event: ServiceEvent) -> dict[str, Any]:
    """Return the wire-format dict for a ServiceEvent payload.

    Shape: {"t": <event type>, **data_fields} with internal-only fields
    ("type" and "target" on the domain model) excluded. Enums, datetimes
    and nested views serialize through pydantic's JSON mode, and None
    fields are dropped.
    """
    return {
        "t": event.event.value,
        **event.data.model_dump(
            mode="json",
            exclude={"type", "target"},
            exclude_none=True,
        ),
    }
