"""
Realtime blueprint: the /ws WebSocket endpoint.

Protocol (JSON text frames):
  client → server   {"type": "authenticate", "token": <bearer token>}
                    {"type": "ping"}   {"type": "pong"}
  server → client   {"type": "ping"}   {"type": "pong"}
                    {"type": "connection_status", "data": {"connected": true, "userId": id}}
                    {"type": "notification", "data": <notification>}
                    {"type": "error", "message": <text>}

A connection is registered only after a valid authenticate message; a
missing or invalid token gets an error frame and the socket is closed. A
socket still unauthenticated after one heartbeat interval is closed too.
"""
import json
import logging
import time

from flask import Blueprint, current_app
from simple_websocket import ConnectionClosed

from tedlist.extensions import db, sock
from tedlist.realtime import Connection

log = logging.getLogger(__name__)
realtime_bp = Blueprint("realtime", __name__)


def _authenticate(conn: Connection, message: dict, registry) -> bool:
    from tedlist.models.user import User
    from tedlist.utils.tokens import verify_token

    token = message.get("token")
    if not token:
        conn.send_json({"type": "error", "message": "Authentication token missing"})
        conn.close()
        return False

    user_id = verify_token(token)
    if user_id is None or db.session.get(User, user_id) is None:
        conn.send_json({"type": "error", "message": "Authentication failed"})
        conn.close()
        return False

    registry.register(conn, user_id)
    conn.send_json({"type": "connection_status", "data": {"connected": True, "userId": user_id}})
    return True


def handle_message(conn: Connection, raw, registry) -> bool:
    """Process one inbound frame. Returns False when the socket must close."""
    conn.is_alive = True
    try:
        message = json.loads(raw)
        if not isinstance(message, dict):
            raise ValueError("frame is not an object")
    except (TypeError, ValueError):
        conn.send_json({"type": "error", "message": "Invalid message format"})
        return True

    msg_type = message.get("type")
    if msg_type == "authenticate":
        return _authenticate(conn, message, registry)
    if msg_type == "ping":
        conn.send_json({"type": "pong"})
    elif msg_type == "pong":
        pass
    else:
        log.warning("Unknown message type from user %s: %r", conn.user_id, msg_type)
    return True


def close_unauthenticated(conn: Connection) -> None:
    log.info("Closing socket that never authenticated")
    conn.send_json({"type": "error", "message": "Authentication timeout"})
    conn.close()


def serve(conn: Connection, registry, auth_timeout: float) -> None:
    """Receive loop for one socket. Returns when the socket must close."""
    auth_deadline = time.monotonic() + auth_timeout
    while True:
        timeout = None
        if not conn.authenticated:
            timeout = max(auth_deadline - time.monotonic(), 0)
        raw = conn.ws.receive(timeout=timeout)
        if raw is not None and not handle_message(conn, raw, registry):
            return
        if not conn.authenticated and time.monotonic() >= auth_deadline:
            close_unauthenticated(conn)
            return


@sock.route("/ws", bp=realtime_bp)
def socket(ws):
    registry = current_app.extensions["connection_registry"]
    conn = Connection(ws)
    conn.send_json({"type": "ping"})
    try:
        serve(conn, registry, current_app.config.get("WS_HEARTBEAT_SECONDS", 30))
    except ConnectionClosed:
        pass
    finally:
        registry.unregister(conn)
        db.session.remove()
