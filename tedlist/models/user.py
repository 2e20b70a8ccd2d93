from datetime import datetime, timezone
from flask_login import UserMixin
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError, VerificationError
from tedlist.extensions import db

_ph = PasswordHasher()


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id                 = db.Column(db.Integer, primary_key=True)
    name               = db.Column(db.String(100), nullable=False)
    email              = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash      = db.Column(db.String(512), nullable=False)
    avatar             = db.Column(db.String(500), nullable=True)
    is_admin           = db.Column(db.Boolean, default=False, nullable=False)
    teddies            = db.Column(db.Integer, default=0, nullable=False)
    # Trading session: the item currently offered, NULL when no session
    active_item_id     = db.Column(
        db.Integer, db.ForeignKey("items.id", ondelete="SET NULL", use_alter=True),
        nullable=True, index=True,
    )
    session_started_at = db.Column(db.DateTime, nullable=True)
    created_at         = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    items       = db.relationship("Item", back_populates="owner", lazy="dynamic",
                                  foreign_keys="Item.user_id")
    active_item = db.relationship("Item", foreign_keys=[active_item_id], post_update=True)
    swipes      = db.relationship("Swipe", back_populates="user", lazy="dynamic",
                                  cascade="all, delete-orphan")

    # ── Password helpers ────────────────────────────────────────────────────
    def set_password(self, password: str) -> None:
        self.password_hash = _ph.hash(password)

    def check_password(self, password: str) -> bool:
        try:
            return _ph.verify(self.password_hash, password)
        except (VerifyMismatchError, InvalidHashError, VerificationError):
            return False

    # ── Trading session helpers ─────────────────────────────────────────────
    @property
    def has_active_session(self) -> bool:
        return self.active_item_id is not None

    @property
    def trading_session(self) -> dict | None:
        if self.active_item_id is None:
            return None
        return {
            "activeItemId": self.active_item_id,
            "startedAt": self.session_started_at.isoformat() if self.session_started_at else None,
        }

    def clear_session(self) -> None:
        self.active_item_id = None
        self.session_started_at = None

    @property
    def swiped_item_ids(self) -> set[int]:
        from tedlist.models.swipe import Swipe
        rows = db.session.query(Swipe.item_id).filter(Swipe.user_id == self.id).all()
        return {item_id for (item_id,) in rows}

    def to_public_dict(self) -> dict:
        return {
            "_id":     self.id,
            "name":    self.name,
            "email":   self.email,
            "avatar":  self.avatar or default_avatar(self.name),
            "teddies": self.teddies,
            "isAdmin": self.is_admin,
        }

    def __repr__(self) -> str:
        return f"<User {self.email}>"


def default_avatar(name: str) -> str:
    """Initials avatar used when a user never uploaded one."""
    from urllib.parse import quote
    return f"https://ui-avatars.com/api/?name={quote(name or 'User')}&background=random"
