"""
Item model.

status moves available → traded only through Deal acceptance; the only way
back to available is an explicit reset. deleted is a soft delete so that
deals keep their item references.
"""
import random
from datetime import datetime, timezone
from tedlist.extensions import db

ITEM_CONDITIONS = ("New", "Like New", "Excellent", "Good", "Fair", "Poor")
ITEM_TYPES      = ("trade", "sell")
ITEM_STATUSES   = ("available", "traded", "deleted")


def _random_teddy_bonus() -> int:
    return random.randint(1, 10)


class Item(db.Model):
    __tablename__ = "items"

    id          = db.Column(db.Integer, primary_key=True)
    user_id     = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title       = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    images      = db.Column(db.JSON, default=list, nullable=False)
    condition   = db.Column(db.String(20), default="Good", nullable=False)
    type        = db.Column(db.String(10), default="trade", nullable=False)
    status      = db.Column(db.String(10), default="available", nullable=False, index=True)
    teddy_bonus = db.Column(db.Integer, default=_random_teddy_bonus, nullable=False)
    created_at  = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at  = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    owner = db.relationship("User", back_populates="items", foreign_keys=[user_id])

    @property
    def is_available(self) -> bool:
        return self.status == "available"

    def to_dict(self, with_owner: bool = True) -> dict:
        from tedlist.utils.storage import public_url
        data = {
            "_id":         self.id,
            "title":       self.title,
            "description": self.description,
            "images":      [public_url(ref) for ref in (self.images or [])],
            "condition":   self.condition,
            "type":        self.type,
            "status":      self.status,
            "teddyBonus":  self.teddy_bonus,
            "createdAt":   self.created_at.isoformat() if self.created_at else None,
        }
        if with_owner:
            data["user"] = {
                "_id":  self.user_id,
                "name": self.owner.name if self.owner else "Unknown User",
            }
        return data

    def to_summary(self) -> dict:
        """Subset embedded in notifications."""
        from tedlist.utils.storage import public_url
        return {
            "_id":         self.id,
            "title":       self.title,
            "images":      [public_url(ref) for ref in (self.images or [])],
            "description": self.description,
            "condition":   self.condition,
        }

    def __repr__(self) -> str:
        return f"<Item {self.id} {self.title!r} [{self.status}]>"
