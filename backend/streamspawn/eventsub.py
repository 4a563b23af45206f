# backend/streamspawn/eventsub.py
"""
Twitch EventSub translation.

Maps an EventSub ``notification`` envelope onto the ``{eventType, data}``
shape that /event accepts, so Twitch can call this service directly.
"""

from typing import Any, Callable, Dict, Optional, Tuple

from .engine.payloads import EventParseError

MESSAGE_TYPE_HEADER = "Twitch-Eventsub-Message-Type"

VERIFICATION = "webhook_callback_verification"
NOTIFICATION = "notification"
REVOCATION = "revocation"


def _subscribe(event: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "userName": event.get("user_name"),
        "userId": event.get("user_id"),
        "tier": event.get("tier"),
        "isGift": event.get("is_gift", False),
    }


def _gift(event: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "userName": event.get("user_name"),
        "userId": event.get("user_id"),
        "total": event.get("total"),
        "tier": event.get("tier"),
        "cumulativeTotal": event.get("cumulative_total"),
    }


def _cheer(event: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "userName": event.get("user_name"),
        "userId": event.get("user_id"),
        "bits": event.get("bits"),
        "message": event.get("message"),
    }


def _raid(event: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "fromBroadcasterName": event.get("from_broadcaster_user_name"),
        "fromBroadcasterId": event.get("from_broadcaster_user_id"),
        "viewers": event.get("viewers"),
    }


def _follow(event: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "userName": event.get("user_name"),
        "userId": event.get("user_id"),
        "followedAt": event.get("followed_at"),
    }


SUBSCRIPTION_TYPES: Dict[str, Tuple[str, Callable[[Dict[str, Any]], Dict[str, Any]]]] = {
    "channel.subscribe": ("subscribe", _subscribe),
    "channel.subscription.gift": ("gift_subscription", _gift),
    "channel.cheer": ("cheer", _cheer),
    "channel.raid": ("raid", _raid),
    "channel.follow": ("follow", _follow),
}


def translate_notification(body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Turn an EventSub notification body into ``{"eventType", "data"}``.

    Returns:
        The translated body, or None for subscription types we do not handle

    Raises:
        EventParseError: if ``subscription`` or ``event`` is not an object
    """
    subscription = body.get("subscription") or {}
    event = body.get("event") or {}
    if not isinstance(subscription, dict) or not isinstance(event, dict):
        raise EventParseError("EventSub 'subscription' and 'event' must be JSON objects")

    sub_type = subscription.get("type", "")
    entry = SUBSCRIPTION_TYPES.get(sub_type) if isinstance(sub_type, str) else None
    if entry is None:
        return None
    event_type, build = entry
    return {"eventType": event_type, "data": build(event)}
