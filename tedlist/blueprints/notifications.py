"""
Notifications blueprint.

GET  /api/notifications                 – all of my notifications, newest first
GET  /api/notifications/recent          – last 5 + unread count
POST /api/notifications/<id>/read       – mark one read (idempotent)
POST /api/notifications/mark-all-read   – mark all read, returns modifiedCount
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from tedlist.utils import notification_service

notif_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")

RECENT_LIMIT = 5


@notif_bp.route("")
@login_required
def get_notifications():
    notifs = notification_service.list_notifications(current_user.id)
    return jsonify(success=True, notifications=[n.to_dict() for n in notifs])


@notif_bp.route("/recent")
@login_required
def recent():
    notifs = notification_service.list_notifications(current_user.id, limit=RECENT_LIMIT)
    return jsonify(
        success=True,
        notifications=[n.to_dict() for n in notifs],
        unreadCount=notification_service.unread_count(current_user.id),
    )


@notif_bp.route("/<int:notification_id>/read", methods=["POST"])
@login_required
def mark_read(notification_id):
    notif = notification_service.mark_as_read(current_user.id, notification_id)
    return jsonify(
        success=True,
        message="Notification marked as read",
        notification=notif.to_dict(),
    )


@notif_bp.route("/mark-all-read", methods=["POST"])
@login_required
def mark_all_read():
    modified = notification_service.mark_all_read(current_user.id)
    return jsonify(
        success=True,
        message="All notifications marked as read",
        modifiedCount=modified,
    )
