# Overview: Realtime broadcaster; tracks announced presence per socket and fans out state changes.

"""
Realtime broadcaster.

Events are fire-and-forget: no acknowledgement, no persistence. A client
that was offline simply misses them and re-fetches through the REST API.

The originator of a change never gets its own echo. For socket-relayed
events that is the sending connection; for HTTP mutations it is the
connection named by the X-Socket-ID request header, when one is sent.
"""

from __future__ import annotations

from flask import current_app, has_request_context, request

from ..extensions import socketio
from discpos.time_utils import utcnow, to_utc_z

ORIGIN_HEADER = "X-Socket-ID"


class PresenceRegistry:
    """
    Process-scoped map of socket sid -> identity announced on that socket.

    Each entry is only touched by events of its own connection, so a plain
    dict is enough.
    """

    def __init__(self):
        self._by_sid: dict[str, dict] = {}

    def announce(self, sid: str, identity: dict) -> None:
        self._by_sid[sid] = identity

    def release(self, sid: str) -> dict | None:
        return self._by_sid.pop(sid, None)

    def get(self, sid: str) -> dict | None:
        return self._by_sid.get(sid)

    def online(self) -> list[dict]:
        return list(self._by_sid.values())

    def clear(self) -> None:
        self._by_sid.clear()

    def __len__(self) -> int:
        return len(self._by_sid)


def get_registry() -> PresenceRegistry:
    return current_app.extensions["presence"]


def stamp(payload: dict) -> dict:
    return {**payload, "timestamp": to_utc_z(utcnow())}


def origin_sid() -> str | None:
    """Socket connection that issued the current HTTP request, if it said so."""
    if not has_request_context():
        return None
    return request.headers.get(ORIGIN_HEADER) or None


def publish(event: str, payload: dict, *, skip_sid: str | None = None) -> None:
    """Broadcast a server-originated event to every connection except skip_sid."""
    socketio.emit(event, stamp(payload), skip_sid=skip_sid)


def publish_product_updated(change_type: str, product: dict, user_name: str | None) -> None:
    publish(
        "product_updated",
        {"type": change_type, "product": product, "user": user_name},
        skip_sid=origin_sid(),
    )


def publish_sale_created(sale: dict, items: list[dict], user_name: str | None) -> None:
    publish(
        "sale_created",
        {"sale": sale, "items": items, "user": user_name},
        skip_sid=origin_sid(),
    )
