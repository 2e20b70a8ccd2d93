"""
Tests for the notification dispatcher and the /api/notifications endpoints.

Realtime delivery is checked with FakeSocket connections registered on the
app's ConnectionRegistry; no real WebSocket is opened.
"""
import pytest

from tedlist.errors import NotFound, ValidationError
from tedlist.extensions import db
from tedlist.realtime import Connection
from tedlist.utils.notification_service import dispatch_notification, notify_best_effort


@pytest.fixture
def people(make_user, make_item):
    alice = make_user("Alice")
    bob   = make_user("Bob")
    item  = make_item(bob.id, "Guitar")
    return alice, bob, item


def _connect(registry, fake_socket, user_id, **kwargs):
    ws = fake_socket(**kwargs)
    conn = Connection(ws)
    registry.register(conn, user_id)
    return ws


# ── dispatch_notification ─────────────────────────────────────────────────────

class TestDispatch:

    @pytest.mark.parametrize("notif_type,title", [
        ("offer",   "New Trade Offer"),
        ("match",   "New Match!"),
        ("message", "New Message"),
        ("system",  "System Notification"),
    ])
    def test_title_follows_type(self, app, people, notif_type, title):
        alice, bob, item = people
        with app.app_context():
            payload = dispatch_notification(bob.id, notif_type, item, alice.id, "  hello  ")
        assert payload["title"] == title
        assert payload["type"] == notif_type
        assert payload["message"] == "hello"
        assert payload["read"] is False
        assert payload["fromUser"]["name"] == "Alice"
        assert payload["item"]["_id"] == item

    def test_system_notification_without_sender_or_item(self, app, people):
        alice, *_ = people
        with app.app_context():
            payload = dispatch_notification(alice.id, "system", None, None, "Welcome!")
        assert payload["fromUser"] is None
        assert payload["item"] is None

    def test_long_message_is_truncated(self, app, people):
        alice, bob, item = people
        with app.app_context():
            payload = dispatch_notification(bob.id, "message", None, alice.id, "x" * 900)
        assert len(payload["message"]) == 500

    def test_unknown_type(self, app, people):
        alice, bob, item = people
        with app.app_context():
            with pytest.raises(ValidationError):
                dispatch_notification(bob.id, "spam", item, alice.id, "hi")

    @pytest.mark.parametrize("field", ["recipient", "sender", "item"])
    def test_missing_references(self, app, people, field):
        from tedlist.models.notification import Notification

        alice, bob, item = people
        args = {"recipient": bob.id, "sender": alice.id, "item": item}
        args[field] = 9999
        with app.app_context():
            with pytest.raises(NotFound):
                dispatch_notification(args["recipient"], "offer", args["item"], args["sender"], "hi")
            assert Notification.query.count() == 0

    def test_pushes_to_every_connection_of_recipient(self, app, people, registry, fake_socket):
        alice, bob, item = people
        laptop = _connect(registry, fake_socket, bob.id)
        phone  = _connect(registry, fake_socket, bob.id)
        other  = _connect(registry, fake_socket, alice.id)

        with app.app_context():
            payload = dispatch_notification(bob.id, "offer", item, alice.id, "Alice likes it")

        for ws in (laptop, phone):
            frames = ws.of_type("notification")
            assert len(frames) == 1
            assert frames[0]["data"]["_id"] == payload["_id"]
            assert frames[0]["data"]["message"] == "Alice likes it"
        assert other.of_type("notification") == []

    def test_offline_recipient_still_gets_stored(self, app, client, people, registry):
        alice, bob, item = people
        assert not registry.is_connected(bob.id)
        with app.app_context():
            dispatch_notification(bob.id, "offer", item, alice.id, "stored")

        notifs = client.get("/api/notifications", headers=bob.headers).get_json()["notifications"]
        assert [n["message"] for n in notifs] == ["stored"]

    def test_broken_socket_does_not_fail_dispatch(self, app, people, registry, fake_socket):
        from tedlist.models.notification import Notification

        alice, bob, item = people
        _connect(registry, fake_socket, bob.id, fail=True)
        with app.app_context():
            dispatch_notification(bob.id, "offer", item, alice.id, "still saved")
            assert Notification.query.filter_by(user_id=bob.id).count() == 1

    def test_best_effort_swallows_errors(self, app, people):
        alice, bob, item = people
        with app.app_context():
            assert notify_best_effort(9999, "offer", item, alice.id, "nobody") is None
            assert notify_best_effort(bob.id, "offer", item, alice.id, "ok")["message"] == "ok"


# ── HTTP endpoints ────────────────────────────────────────────────────────────

class TestNotificationEndpoints:

    def _seed(self, app, recipient_id, sender_id, count):
        with app.app_context():
            return [
                dispatch_notification(recipient_id, "message", None, sender_id, f"msg {n}")["_id"]
                for n in range(count)
            ]

    def test_list_is_newest_first(self, app, client, people):
        alice, bob, _ = people
        ids = self._seed(app, bob.id, alice.id, 3)
        body = client.get("/api/notifications", headers=bob.headers).get_json()
        assert body["success"] is True
        assert [n["_id"] for n in body["notifications"]] == list(reversed(ids))

    def test_requires_login(self, client):
        assert client.get("/api/notifications").status_code == 401

    def test_mark_read_is_idempotent(self, app, client, people):
        alice, bob, _ = people
        (notif_id,) = self._seed(app, bob.id, alice.id, 1)

        for _ in range(2):
            resp = client.post(f"/api/notifications/{notif_id}/read", headers=bob.headers)
            assert resp.status_code == 200
            assert resp.get_json()["notification"]["read"] is True

    def test_cannot_read_someone_elses_notification(self, app, client, people):
        from tedlist.models.notification import Notification

        alice, bob, _ = people
        (notif_id,) = self._seed(app, bob.id, alice.id, 1)
        resp = client.post(f"/api/notifications/{notif_id}/read", headers=alice.headers)
        assert resp.status_code == 404
        with app.app_context():
            assert db.session.get(Notification, notif_id).read is False

    def test_mark_all_read_counts_only_unread(self, app, client, people):
        alice, bob, _ = people
        ids = self._seed(app, bob.id, alice.id, 3)
        client.post(f"/api/notifications/{ids[0]}/read", headers=bob.headers)

        resp = client.post("/api/notifications/mark-all-read", headers=bob.headers)
        assert resp.get_json()["modifiedCount"] == 2
        again = client.post("/api/notifications/mark-all-read", headers=bob.headers)
        assert again.get_json()["modifiedCount"] == 0

    def test_recent_limits_and_counts_unread(self, app, client, people):
        alice, bob, _ = people
        self._seed(app, bob.id, alice.id, 7)
        body = client.get("/api/notifications/recent", headers=bob.headers).get_json()
        assert len(body["notifications"]) == 5
        assert body["unreadCount"] == 7
        assert body["notifications"][0]["message"] == "msg 6"
