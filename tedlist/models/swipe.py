from datetime import datetime, timezone
from tedlist.extensions import db


class Swipe(db.Model):
    """One decision by a user on a candidate item.

    The (user_id, item_id) pair is unique: the rows of a user form their
    swiped-items set, and an item can be decided on only once per user
    until the user resets their swipes.
    """
    __tablename__ = "swipes"

    id         = db.Column(db.Integer, primary_key=True)
    user_id    = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id    = db.Column(
        db.Integer, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    direction  = db.Column(db.String(5), nullable=False)   # left | right
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("user_id", "item_id", name="uq_swipe_user_item"),
    )

    user = db.relationship("User", back_populates="swipes")
    item = db.relationship("Item")

    def __repr__(self) -> str:
        return f"<Swipe user={self.user_id} item={self.item_id} {self.direction}>"
