from datetime import datetime, timezone
from tedlist.extensions import db


class TeddyTransaction(db.Model):
    """Ledger row for every change to a user's teddy balance."""
    __tablename__ = "teddy_transactions"

    id          = db.Column(db.Integer, primary_key=True)
    user_id     = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount      = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(200), nullable=False)
    created_at  = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    user = db.relationship("User", backref=db.backref("teddy_transactions", lazy="dynamic"))

    def to_dict(self) -> dict:
        return {
            "amount":      self.amount,
            "description": self.description,
            "timestamp":   self.created_at.isoformat() if self.created_at else None,
        }
