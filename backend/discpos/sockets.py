# Overview: Socket.IO event handlers for presence and client-pushed relay events.

"""
Realtime channel handlers.

Presence comes from an explicit `authenticate` message sent after the
socket connects; the HTTP bearer token is not consulted. Every broadcast
here skips the sending connection.
"""

from flask import current_app, request
from flask_socketio import emit

from .extensions import socketio
from .services.realtime_service import get_registry, stamp


def _identity(data) -> dict | None:
    if not isinstance(data, dict) or data.get("id") is None:
        return None
    return {"id": data.get("id"), "full_name": data.get("full_name") or data.get("name")}


@socketio.on("connect")
def on_connect(auth=None):
    current_app.logger.debug("Client connected: %s", request.sid)


@socketio.on("authenticate")
def on_authenticate(data):
    identity = _identity(data)
    if identity is None:
        emit("error", {"error": "authenticate requires an id"})
        return

    get_registry().announce(request.sid, identity)
    emit("user_online", stamp({
        "userId": identity["id"],
        "userName": identity["full_name"],
    }), broadcast=True, include_self=False)

    # Lets the client tag its HTTP calls (X-Socket-ID) so it is not echoed
    emit("authenticated", {"sid": request.sid})


@socketio.on("product_updated")
def on_product_updated(data):
    identity = get_registry().get(request.sid) or {}
    payload = dict(data) if isinstance(data, dict) else {"data": data}
    payload["updatedBy"] = identity.get("full_name")
    emit("product_updated", stamp(payload), broadcast=True, include_self=False)


@socketio.on("sale_created")
def on_sale_created(data):
    identity = get_registry().get(request.sid) or {}
    payload = dict(data) if isinstance(data, dict) else {"data": data}
    payload["createdBy"] = identity.get("full_name")
    emit("sale_created", stamp(payload), broadcast=True, include_self=False)


@socketio.on("disconnect")
def on_disconnect(*args):
    current_app.logger.debug("Client disconnected: %s", request.sid)
    identity = get_registry().release(request.sid)
    if identity:
        emit("user_offline", stamp({
            "userId": identity["id"],
            "userName": identity["full_name"],
        }), broadcast=True, include_self=False)
