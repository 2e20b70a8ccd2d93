"""Tests for the maintenance CLI commands and the health route."""
from tedlist.extensions import db


def test_make_admin(app, make_user):
    from tedlist.models.user import User

    alice = make_user("Alice")
    result = app.test_cli_runner().invoke(args=["make-admin", alice.email.upper()])
    assert result.exit_code == 0
    assert "is now an administrator" in result.output
    with app.app_context():
        assert db.session.get(User, alice.id).is_admin is True


def test_make_admin_unknown_email(app):
    result = app.test_cli_runner().invoke(args=["make-admin", "ghost@example.com"])
    assert result.exit_code != 0
    assert "No user with email" in result.output


def test_list_users(app, make_user):
    make_user("Alice")
    make_user("Bob", is_admin=True)
    result = app.test_cli_runner().invoke(args=["list-users"])
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == 2
    assert "[admin]" in lines[1]


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_unknown_route_is_json(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
