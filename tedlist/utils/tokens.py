"""
Bearer tokens for the HTTP API and the realtime channel.

Tokens are itsdangerous timed signatures over {"uid": <user id>}, keyed by
the app's SECRET_KEY and valid for TOKEN_MAX_AGE seconds.
"""
from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

_SALT = "tedlist-auth-token"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=_SALT)


def issue_token(user_id: int) -> str:
    return _serializer().dumps({"uid": user_id})


def verify_token(token: str) -> int | None:
    """Return the user id carried by token, or None if it is invalid/expired."""
    if not token:
        return None
    try:
        data = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired:
        return None
    except BadSignature:
        return None
    uid = data.get("uid") if isinstance(data, dict) else None
    return uid if isinstance(uid, int) else None


def bearer_from_header(header: str | None) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
