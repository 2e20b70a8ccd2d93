"""
Realtime connection registry.

Maps an authenticated user id to the set of live WebSocket connections that
user currently holds. It is only a delivery-reachability oracle: business
state never lives here, and a restart drops every registration (clients
re-authenticate on reconnect).

Liveness: a heartbeat job runs every WS_HEARTBEAT_SECONDS. Each run closes
and unregisters connections that have not sent anything since the previous
probe, then marks the survivors as pending and sends them {"type": "ping"}.
Any inbound message (normally the client's "pong") marks a connection alive.
"""
import atexit
import json
import logging
import threading

log = logging.getLogger(__name__)


class Connection:
    """One duplex socket plus the bookkeeping the registry needs."""

    def __init__(self, ws):
        self.ws       = ws
        self.user_id  = None
        self.is_alive = True
        self._send_lock = threading.Lock()

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None

    def send_json(self, payload: dict) -> bool:
        """Fire-and-forget send. Returns False if the socket refused it."""
        try:
            data = json.dumps(payload, default=str)
            with self._send_lock:
                self.ws.send(data)
            return True
        except Exception:
            log.warning("Send to user %s failed", self.user_id, exc_info=True)
            return False

    def close(self) -> None:
        try:
            self.ws.close()
        except Exception:
            log.debug("Close on user %s socket failed", self.user_id, exc_info=True)

    def __repr__(self) -> str:
        return f"<Connection user={self.user_id} alive={self.is_alive}>"


class ConnectionRegistry:
    """Process-local user id → {Connection} map with a heartbeat job.

    Created once per process as a Flask extension; init_app() binds it to an
    app and, when enabled, starts the APScheduler heartbeat.
    """

    def __init__(self, app=None):
        self._by_user: dict[int, set[Connection]] = {}
        self._lock = threading.Lock()
        self._scheduler = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        app.extensions["connection_registry"] = self
        if app.config.get("WS_HEARTBEAT_ENABLED") and not app.testing:
            self.start_heartbeat(app.config.get("WS_HEARTBEAT_SECONDS", 30))

    # ── Registration ─────────────────────────────────────────────────────────
    def register(self, conn: Connection, user_id: int) -> None:
        if conn.user_id is not None and conn.user_id != user_id:
            self.unregister(conn)
        conn.user_id = user_id
        conn.is_alive = True
        with self._lock:
            self._by_user.setdefault(user_id, set()).add(conn)
        log.info("User %s connected (%d live connection(s))",
                 user_id, len(self.connections_for(user_id)))

    def unregister(self, conn: Connection) -> None:
        if conn.user_id is None:
            return
        with self._lock:
            conns = self._by_user.get(conn.user_id)
            if conns is None:
                return
            conns.discard(conn)
            if not conns:
                del self._by_user[conn.user_id]
        log.info("User %s disconnected", conn.user_id)

    def connections_for(self, user_id: int) -> list[Connection]:
        with self._lock:
            return list(self._by_user.get(user_id, ()))

    def is_connected(self, user_id: int) -> bool:
        with self._lock:
            return bool(self._by_user.get(user_id))

    def all_connections(self) -> list[Connection]:
        with self._lock:
            return [c for conns in self._by_user.values() for c in conns]

    def clear(self) -> None:
        with self._lock:
            self._by_user.clear()

    # ── Delivery ─────────────────────────────────────────────────────────────
    def send_to_user(self, user_id: int, payload: dict) -> int:
        """Push payload to every live connection of user_id.

        Returns how many connections accepted the send; 0 means the user is
        not reachable right now.
        """
        delivered = 0
        for conn in self.connections_for(user_id):
            if conn.send_json(payload):
                delivered += 1
        return delivered

    # ── Liveness ─────────────────────────────────────────────────────────────
    def heartbeat(self) -> int:
        """Run one heartbeat pass. Returns the number of connections dropped."""
        dropped = 0
        for conn in self.all_connections():
            if not conn.is_alive:
                log.info("Terminating inactive connection for user %s", conn.user_id)
                self.unregister(conn)
                conn.close()
                dropped += 1
                continue
            conn.is_alive = False
            if not conn.send_json({"type": "ping"}):
                self.unregister(conn)
                conn.close()
                dropped += 1
        return dropped

    def start_heartbeat(self, interval: int) -> None:
        if self._scheduler is not None:
            return
        from apscheduler.schedulers.background import BackgroundScheduler

        self._scheduler = BackgroundScheduler(daemon=True)
        self._scheduler.add_job(
            self.heartbeat, "interval", seconds=interval,
            id="ws_heartbeat", max_instances=1, coalesce=True,
        )
        self._scheduler.start()
        atexit.register(self.shutdown)
        log.info("WebSocket heartbeat started (every %ss)", interval)

    def shutdown(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
        for conn in self.all_connections():
            conn.close()
        self.clear()
