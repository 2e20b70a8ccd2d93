"""
Notification dispatcher.

dispatch_notification() persists a Notification and then tries to push it
over the recipient's live sockets. Persisting is the contract; the push is a
side channel. A recipient who is offline simply finds the row on their next
GET /api/notifications.

The connection registry is injected. When the caller passes none, the one
bound to the current app (app.extensions["connection_registry"]) is used.
"""
import logging

from flask import current_app

from tedlist.errors import NotFound, ValidationError
from tedlist.extensions import db

log = logging.getLogger(__name__)


def _registry_for_app():
    return current_app.extensions.get("connection_registry")


def dispatch_notification(
    recipient_id: int,
    notif_type: str,
    item_id: int | None,
    from_user_id: int | None,
    message: str,
    registry=None,
) -> dict:
    """Create, persist and push one notification. Commits.

    Raises NotFound if the recipient, sender or item does not exist and
    ValidationError for an unknown type. Returns the presentation dict.
    """
    from tedlist.models.user import User
    from tedlist.models.item import Item
    from tedlist.models.notification import Notification, NOTIFICATION_TITLES

    if notif_type not in NOTIFICATION_TITLES:
        raise ValidationError(f"Unknown notification type {notif_type!r}")

    # References are checked before the insert, not assumed
    if db.session.get(User, recipient_id) is None:
        raise NotFound("Recipient not found")
    if from_user_id is not None and db.session.get(User, from_user_id) is None:
        raise NotFound("Sender not found")
    if item_id is not None and db.session.get(Item, item_id) is None:
        raise NotFound("Item not found")

    notif = Notification(
        user_id=recipient_id,
        from_user_id=from_user_id,
        item_id=item_id,
        type=notif_type,
        title=NOTIFICATION_TITLES[notif_type],
        message=message.strip()[:500],
        read=False,
    )
    db.session.add(notif)
    db.session.commit()

    # Re-read with sender and item joined for presentation
    notif = db.session.get(Notification, notif.id, populate_existing=True)
    payload = notif.to_dict()

    if registry is None:
        registry = _registry_for_app()
    if registry is not None:
        try:
            delivered = registry.send_to_user(recipient_id, {"type": "notification", "data": payload})
        except Exception:
            log.exception("Realtime push of notification %s failed", notif.id)
            delivered = 0
        if delivered:
            log.debug("Notification %s pushed to user %s (%d socket(s))",
                      notif.id, recipient_id, delivered)
        else:
            log.debug("User %s not connected; notification %s stored only",
                      recipient_id, notif.id)
    return payload


def notify_best_effort(*args, **kwargs) -> dict | None:
    """dispatch_notification() for callers whose primary effect is already
    committed. Failures are logged and swallowed; returns None on failure."""
    try:
        return dispatch_notification(*args, **kwargs)
    except Exception:
        db.session.rollback()
        log.exception("Notification dispatch failed (recipient=%s)",
                      args[0] if args else kwargs.get("recipient_id"))
        return None


# ── Read-side helpers ─────────────────────────────────────────────────────────

def list_notifications(user_id: int, limit: int | None = None) -> list:
    from tedlist.models.notification import Notification
    query = (
        Notification.query
        .filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def unread_count(user_id: int) -> int:
    from tedlist.models.notification import Notification
    return Notification.query.filter_by(user_id=user_id, read=False).count()


def mark_as_read(user_id: int, notification_id: int):
    """Mark one of user_id's notifications read. Idempotent. Commits.

    A notification owned by someone else is reported as NotFound so the
    caller learns nothing about other users' rows.
    """
    from tedlist.models.notification import Notification
    notif = Notification.query.filter_by(id=notification_id, user_id=user_id).first()
    if notif is None:
        raise NotFound("Notification not found")
    if not notif.read:
        notif.read = True
        db.session.commit()
    return notif


def mark_all_read(user_id: int) -> int:
    """Mark every unread notification of user_id read. Returns rows changed."""
    from tedlist.models.notification import Notification
    modified = (
        Notification.query
        .filter_by(user_id=user_id, read=False)
        .update({"read": True}, synchronize_session=False)
    )
    db.session.commit()
    return modified
