"""
Match model.

A Match is a detected mutual right-swipe between two users' active items.
The pair is stored in canonical order (lower item id first) and is unique,
so inserting a Match doubles as the compare-and-swap that decides which of
two concurrent swipes reports the match.

status: detected → accepted (a Deal was made) | rejected (offer declined)
"""
from datetime import datetime, timezone
from tedlist.extensions import db

MATCH_STATUSES = ("detected", "accepted", "rejected")


class Match(db.Model):
    __tablename__ = "matches"

    id           = db.Column(db.Integer, primary_key=True)
    item_low_id  = db.Column(db.Integer, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    item_high_id = db.Column(db.Integer, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    user_low_id  = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_high_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status       = db.Column(db.String(10), default="detected", nullable=False)
    created_at   = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at   = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("item_low_id", "item_high_id", name="uq_match_item_pair"),
    )

    item_low  = db.relationship("Item", foreign_keys=[item_low_id])
    item_high = db.relationship("Item", foreign_keys=[item_high_id])
    user_low  = db.relationship("User", foreign_keys=[user_low_id])
    user_high = db.relationship("User", foreign_keys=[user_high_id])

    @classmethod
    def for_pair(cls, user_a: int, item_a: int, user_b: int, item_b: int) -> "Match":
        """Build an unsaved Match with the pair in canonical order."""
        if item_a > item_b:
            user_a, item_a, user_b, item_b = user_b, item_b, user_a, item_a
        return cls(item_low_id=item_a, item_high_id=item_b,
                   user_low_id=user_a, user_high_id=user_b)

    @classmethod
    def find_pair(cls, item_a: int, item_b: int) -> "Match | None":
        low, high = sorted((item_a, item_b))
        return cls.query.filter_by(item_low_id=low, item_high_id=high).first()

    def to_dict(self, viewer_id: int) -> dict:
        """Render from the viewer's side: own item vs. the other party's."""
        if viewer_id == self.user_low_id:
            mine, theirs, other = self.item_low, self.item_high, self.user_high
        else:
            mine, theirs, other = self.item_high, self.item_low, self.user_low
        return {
            "_id":           self.id,
            "status":        self.status,
            "itemId":        mine.id if mine else None,
            "matchedItemId": theirs.id if theirs else None,
            "matchedItem":   theirs.to_summary() if theirs else None,
            "matchedUser":   {"_id": other.id, "name": other.name} if other else None,
            "createdAt":     self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Match {self.item_low_id}↔{self.item_high_id} [{self.status}]>"
