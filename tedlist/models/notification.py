"""
Notification model.

Created by whichever action produced the event (swipe, match, trade
accept/decline), owned by the recipient for reading. read flips to True when
the recipient marks it; rows are never deleted by the normal flow.
"""
from datetime import datetime, timezone
from tedlist.extensions import db

NOTIFICATION_TITLES = {
    "offer":   "New Trade Offer",
    "match":   "New Match!",
    "message": "New Message",
    "system":  "System Notification",
}


class Notification(db.Model):
    __tablename__ = "notifications"

    id           = db.Column(db.Integer, primary_key=True)
    user_id      = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)   # recipient
    from_user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    item_id      = db.Column(db.Integer, db.ForeignKey("items.id", ondelete="SET NULL"), nullable=True, index=True)
    type         = db.Column(db.String(10),  nullable=False)
    title        = db.Column(db.String(100), nullable=False)
    message      = db.Column(db.String(500), nullable=False)
    read         = db.Column(db.Boolean, default=False, nullable=False)
    created_at   = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at   = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.Index("ix_notifications_user_read_created", "user_id", "read", "created_at"),
    )

    user      = db.relationship("User", foreign_keys=[user_id], backref="notifications")
    from_user = db.relationship("User", foreign_keys=[from_user_id], lazy="joined")
    item      = db.relationship("Item", foreign_keys=[item_id], lazy="joined")

    def to_dict(self) -> dict:
        return {
            "_id":       self.id,
            "type":      self.type,
            "title":     self.title,
            "message":   self.message,
            "read":      self.read,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "fromUser":  (
                {"_id": self.from_user.id, "name": self.from_user.name, "avatar": self.from_user.avatar}
                if self.from_user else None
            ),
            "item":      self.item.to_summary() if self.item else None,
        }
