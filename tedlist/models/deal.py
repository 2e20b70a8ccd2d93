from datetime import datetime, timezone
from tedlist.extensions import db

DEAL_STATUSES = ("pending", "accepted", "declined", "countered", "completed")

# Ordered item lists on each side of a deal
deal_sender_items = db.Table(
    "deal_sender_items",
    db.Column("deal_id", db.Integer, db.ForeignKey("deals.id", ondelete="CASCADE"), primary_key=True),
    db.Column("item_id", db.Integer, db.ForeignKey("items.id", ondelete="CASCADE"), primary_key=True),
    db.Column("position", db.Integer, nullable=False, default=0),
)

deal_receiver_items = db.Table(
    "deal_receiver_items",
    db.Column("deal_id", db.Integer, db.ForeignKey("deals.id", ondelete="CASCADE"), primary_key=True),
    db.Column("item_id", db.Integer, db.ForeignKey("items.id", ondelete="CASCADE"), primary_key=True),
    db.Column("position", db.Integer, nullable=False, default=0),
)


class Deal(db.Model):
    """A persisted trade between a sender and a receiver.

    The Deal is the only thing allowed to flip its items to traded. Use
    set_status() rather than assigning status directly so last_activity_at
    moves with every status change.
    """
    __tablename__ = "deals"

    id               = db.Column(db.Integer, primary_key=True)
    sender_id        = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id      = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status           = db.Column(db.String(10), default="pending", nullable=False)
    teddies_earned   = db.Column(db.Integer, default=0, nullable=False)
    last_activity_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    created_at       = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at       = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    sender         = db.relationship("User", foreign_keys=[sender_id])
    receiver       = db.relationship("User", foreign_keys=[receiver_id])
    sender_items   = db.relationship("Item", secondary=deal_sender_items,
                                     order_by=deal_sender_items.c.position)
    receiver_items = db.relationship("Item", secondary=deal_receiver_items,
                                     order_by=deal_receiver_items.c.position)

    def set_status(self, status: str) -> None:
        if status not in DEAL_STATUSES:
            raise ValueError(f"Unknown deal status {status!r}")
        if status != self.status:
            self.status = status
            self.last_activity_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict:
        return {
            "_id":            self.id,
            "sender":         {"_id": self.sender.id, "name": self.sender.name, "avatar": self.sender.avatar},
            "receiver":       {"_id": self.receiver.id, "name": self.receiver.name, "avatar": self.receiver.avatar},
            "senderItems":    [i.to_dict(with_owner=False) for i in self.sender_items],
            "receiverItems":  [i.to_dict(with_owner=False) for i in self.receiver_items],
            "status":         self.status,
            "teddiesEarned":  self.teddies_earned,
            "lastActivityAt": self.last_activity_at.isoformat() if self.last_activity_at else None,
            "createdAt":      self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Deal {self.id} {self.sender_id}→{self.receiver_id} [{self.status}]>"
