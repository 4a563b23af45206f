# backend/streamspawn/engine/payloads.py
"""
Inbound payload validation.

Each known event kind has a pydantic model naming its required fields. A body
that is not ``{"eventType": str, "data": object}``, or whose data lacks a
required field for its kind, is rejected as a whole with EventParseError.
Unknown event types pass through untouched so the engine can skip them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .world import Event, EventKind


class EventParseError(ValueError):
    """The inbound notification could not be turned into an Event."""


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SubscribePayload(_Payload):
    user_name: str = Field(..., alias="userName")
    user_id: Optional[Union[str, int]] = Field(None, alias="userId")
    tier: Optional[Union[str, int]] = None
    is_gift: bool = Field(False, alias="isGift")


class GiftSubscriptionPayload(_Payload):
    # Anonymous gifts arrive with a null user name
    user_name: Optional[str] = Field(..., alias="userName")
    user_id: Optional[Union[str, int]] = Field(None, alias="userId")
    total: int
    tier: Optional[Union[str, int]] = None
    cumulative_total: Optional[int] = Field(None, alias="cumulativeTotal")


class CheerPayload(_Payload):
    user_name: str = Field(..., alias="userName")
    user_id: Optional[Union[str, int]] = Field(None, alias="userId")
    bits: int
    message: Optional[str] = None


class RaidPayload(_Payload):
    from_broadcaster_name: str = Field(..., alias="fromBroadcasterName")
    from_broadcaster_id: Optional[Union[str, int]] = Field(None, alias="fromBroadcasterId")
    viewers: int


class FollowPayload(_Payload):
    user_name: str = Field(..., alias="userName")
    user_id: Optional[Union[str, int]] = Field(None, alias="userId")
    followed_at: Optional[str] = Field(None, alias="followedAt")


PAYLOAD_MODELS: Dict[EventKind, Type[_Payload]] = {
    EventKind.SUBSCRIBE: SubscribePayload,
    EventKind.GIFT_SUBSCRIPTION: GiftSubscriptionPayload,
    EventKind.CHEER: CheerPayload,
    EventKind.RAID: RaidPayload,
    EventKind.FOLLOW: FollowPayload,
}


# Literal payloads used by the manual test triggers
SAMPLE_PAYLOADS: Dict[EventKind, Dict[str, Any]] = {
    EventKind.SUBSCRIBE: {
        "userName": "TestUser",
        "userId": "12345",
        "tier": "1000",
        "isGift": False,
    },
    EventKind.GIFT_SUBSCRIPTION: {
        "userName": "TestGifter",
        "userId": "12345",
        "total": 5,
        "tier": "1000",
    },
    EventKind.CHEER: {
        "userName": "TestCheerer",
        "userId": "12345",
        "bits": 500,
        "message": "Test cheer message!",
    },
    EventKind.RAID: {
        "fromBroadcasterName": "TestRaider",
        "viewers": 100,
    },
    EventKind.FOLLOW: {
        "userName": "TestFollower",
        "userId": "12345",
        "followedAt": "2024-01-01T00:00:00Z",
    },
}

# Short names accepted by the test triggers
KIND_ALIASES: Dict[str, EventKind] = {
    "sub": EventKind.SUBSCRIBE,
    "gift": EventKind.GIFT_SUBSCRIPTION,
    "bits": EventKind.CHEER,
}


def resolve_kind_name(name: str) -> EventKind | None:
    """Map a wire name or alias (``gift``, ``bits``...) to an EventKind."""
    lowered = name.strip().lower()
    return KIND_ALIASES.get(lowered) or EventKind.from_wire(lowered)


def validate_fields(kind: EventKind, data: Dict[str, Any]) -> _Payload:
    try:
        return PAYLOAD_MODELS[kind].model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise EventParseError(f"Invalid {kind.value} payload: {problems}") from e


def parse_event(body: Any) -> Event:
    """
    Build an Event from a decoded ``{"eventType": ..., "data": {...}}`` body.

    Raises:
        EventParseError: if the envelope or a known kind's fields are malformed
    """
    if not isinstance(body, dict):
        raise EventParseError("Request body must be a JSON object")

    event_type = body.get("eventType")
    if not isinstance(event_type, str) or not event_type:
        raise EventParseError("Missing or invalid 'eventType'")

    data = body.get("data")
    if not isinstance(data, dict):
        raise EventParseError("Missing or invalid 'data' object")

    kind = EventKind.from_wire(event_type)
    payload = validate_fields(kind, data) if kind is not None else None
    return Event.create(event_type, data, payload=payload)
