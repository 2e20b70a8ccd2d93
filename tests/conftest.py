"""
Shared fixtures.

Every test gets a fresh app on an in-memory SQLite database. Data is set up
inside short app contexts and handed back as plain ids so that test-client
requests run in their own contexts (Flask-Login caches the user on g).
"""
import json
from types import SimpleNamespace

import pytest

from tedlist import create_app
from tedlist.extensions import db


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    app.extensions["connection_registry"].clear()
    with app.app_context():
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def registry(app):
    return app.extensions["connection_registry"]


@pytest.fixture
def make_user(app):
    from tedlist.models.user import User
    from tedlist.utils.tokens import issue_token

    counter = {"n": 0}

    def _make(name: str = None, password: str = "password123", is_admin: bool = False):
        counter["n"] += 1
        name = name or f"User{counter['n']}"
        with app.app_context():
            user = User(name=name, email=f"{name.lower()}{counter['n']}@example.com",
                        is_admin=is_admin)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            token = issue_token(user.id)
            return SimpleNamespace(
                id=user.id, name=name, email=user.email, password=password,
                token=token, headers={"Authorization": f"Bearer {token}"},
            )
    return _make


@pytest.fixture
def make_item(app):
    from tedlist.models.item import Item

    def _make(owner_id: int, title: str = "Teddy bear", status: str = "available",
              type: str = "trade", images=None) -> int:
        with app.app_context():
            item = Item(user_id=owner_id, title=title, description=f"A {title.lower()}",
                        status=status, type=type, images=images or ["uploads/teddy.jpg"])
            db.session.add(item)
            db.session.commit()
            return item.id
    return _make


class FakeSocket:
    """Stands in for a simple-websocket Server: records frames, can fail.

    receive() hands out the queued incoming frames; once they run out it
    times out (returns None) or, with no timeout, reports the peer gone.
    """

    def __init__(self, fail: bool = False, incoming=None):
        self.sent = []
        self.closed = False
        self.fail = fail
        self.incoming = [json.dumps(m) for m in (incoming or [])]

    def receive(self, timeout=None):
        if self.incoming:
            return self.incoming.pop(0)
        if timeout is None or self.closed:
            from simple_websocket import ConnectionClosed
            raise ConnectionClosed()
        return None

    def send(self, data):
        if self.fail or self.closed:
            raise ConnectionError("socket is gone")
        self.sent.append(json.loads(data))

    def close(self):
        self.closed = True

    def of_type(self, msg_type: str) -> list:
        return [m for m in self.sent if m.get("type") == msg_type]


@pytest.fixture
def fake_socket():
    return FakeSocket
