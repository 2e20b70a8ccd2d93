"""
Trading session / swipe engine.

A user's trading session is the item they currently offer (User.active_item_id).
While a session is active they swipe on other users' available items; each
decision lands in the swipes table and a right swipe may complete a match.

Match detection is commit-then-check: the swipe row is committed before the
reciprocity query runs, so of two users swiping on each other at the same
moment, whichever checks last always sees both swipes. The Match row is
unique on its (canonical) item pair, so inserting it is a compare-and-swap:
exactly one swipe creates it and sends the match notifications.

Notification delivery is best-effort throughout; a failed notification never
undoes a recorded swipe or its reward.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError

from tedlist.errors import Forbidden, InvalidState, NotFound, ValidationError
from tedlist.extensions import db
from tedlist.utils.notification_service import notify_best_effort
from tedlist.utils.reward_service import award_teddies, match_bonus, swipe_reward

log = logging.getLogger(__name__)

SWIPE_DIRECTIONS = ("left", "right")


# ── Data classes ──────────────────────────────────────────────────────────────

@dataclass
class SwipeResult:
    """Outcome of one swipe."""
    is_match: bool
    teddy_bonus: int
    matched_user: str | None = None
    matched_item_id: int | None = None

    def to_dict(self) -> dict:
        data = {
            "success":    True,
            "isMatch":    self.is_match,
            "teddyBonus": self.teddy_bonus,
        }
        if self.is_match:
            data["matchedUser"] = self.matched_user
            data["matchedItemId"] = self.matched_item_id
        return data


# ── Session ───────────────────────────────────────────────────────────────────

def start_session(user, item_id: int):
    """Offer item_id for trade. The item must be the user's and available."""
    from tedlist.models.item import Item

    item = db.session.get(Item, item_id)
    if item is None or item.status == "deleted":
        raise NotFound("Item not found")
    if item.user_id != user.id:
        raise Forbidden("You can only offer your own items")
    if not item.is_available:
        raise InvalidState("Item is not available for trading")

    user.active_item_id = item.id
    user.session_started_at = datetime.now(timezone.utc)
    db.session.commit()
    log.info("User %s started a trading session with item %s", user.id, item.id)
    return item


def list_candidates(user) -> list:
    """Tradeable items the user has not decided on yet, newest first."""
    from tedlist.models.item import Item
    from tedlist.models.swipe import Swipe

    swiped = db.session.query(Swipe.item_id).filter(Swipe.user_id == user.id)
    return (
        Item.query
        .filter(
            Item.user_id != user.id,
            Item.status == "available",
            Item.type == "trade",
            Item.id.not_in(swiped),
        )
        .order_by(Item.created_at.desc(), Item.id.desc())
        .all()
    )


# ── Swipe ─────────────────────────────────────────────────────────────────────

def record_swipe(user, item_id: int, direction: str) -> SwipeResult:
    from tedlist.models.item import Item
    from tedlist.models.swipe import Swipe

    if direction not in SWIPE_DIRECTIONS:
        raise ValidationError("direction must be 'left' or 'right'",
                              fields={"direction": ["Must be 'left' or 'right'."]})
    if not user.has_active_session:
        raise InvalidState("No active trading session")

    item = db.session.get(Item, item_id)
    if item is None or item.status == "deleted":
        raise NotFound("Item not found")
    if item.user_id == user.id:
        raise InvalidState("You cannot swipe on your own item")
    if not item.is_available:
        raise InvalidState("Item is no longer available")

    user_id      = user.id
    user_name    = user.name
    my_session   = user.session_started_at
    my_item_id   = user.active_item_id
    item_title   = item.title
    item_owner   = item.user_id

    # Primary effect: the swipe itself
    db.session.add(Swipe(user_id=user_id, item_id=item_id, direction=direction))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise InvalidState("You have already swiped on this item")
    log.debug("User %s swiped %s on item %s", user_id, direction, item_id)

    result = SwipeResult(is_match=False, teddy_bonus=swipe_reward())

    if direction == "right":
        notify_best_effort(
            item_owner, "offer", item_id, user_id,
            f'{user_name} is interested in your item "{item_title}"',
        )
        other = _find_reciprocal_user(user_id, my_item_id, item_id)
        if other is not None:
            since = max((t for t in (my_session, other.session_started_at) if t is not None),
                        default=None)
            created = _record_match(user_id, my_item_id, other.id, item_id, since=since)
            if created:
                other_id, other_name = other.id, other.name
                notify_best_effort(
                    other_id, "match", item_id, user_id,
                    f'You have a match with {user_name} for "{item_title}"',
                )
                notify_best_effort(
                    user_id, "match", my_item_id, other_id,
                    f"You have a match with {other_name}",
                )
            result = SwipeResult(
                is_match=True,
                teddy_bonus=match_bonus(),
                matched_user=other.name,
                matched_item_id=item_id,
            )

    award_teddies(
        user_id, result.teddy_bonus,
        "Trade match bonus" if result.is_match else "Swipe reward",
    )
    db.session.commit()
    return result


def _find_reciprocal_user(user_id: int, my_item_id: int, item_id: int):
    """The user currently offering item_id who already swiped right on my_item_id."""
    from tedlist.models.user import User
    from tedlist.models.swipe import Swipe

    return (
        User.query
        .join(Swipe, and_(
            Swipe.user_id == User.id,
            Swipe.item_id == my_item_id,
            Swipe.direction == "right",
        ))
        .filter(User.active_item_id == item_id, User.id != user_id)
        .first()
    )


def _record_match(user_id: int, my_item_id: int, other_id: int, other_item_id: int,
                  since=None) -> bool:
    """Record the Match for this pair. True only for the caller that created
    (or revived) it; that caller sends the match notifications.

    A Match left over from an earlier cycle (accepted, rejected, or detected
    before either current session started at `since`) is moved back to
    detected with a conditional UPDATE, which then acts as the
    compare-and-swap instead of the insert.
    """
    from tedlist.models.match import Match

    existing = Match.find_pair(my_item_id, other_item_id)
    if existing is not None:
        return _revive_match(existing.id, since)
    db.session.add(Match.for_pair(user_id, my_item_id, other_id, other_item_id))
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent swipe inserted the same pair first
        db.session.rollback()
        return False
    log.info("Match detected: user %s item %s <-> user %s item %s",
             user_id, my_item_id, other_id, other_item_id)
    return True


def _revive_match(match_id: int, since) -> bool:
    from tedlist.models.match import Match

    stale = Match.status != "detected"
    if since is not None:
        stale = or_(stale, Match.updated_at < since)
    revived = (
        Match.query
        .filter(Match.id == match_id, stale)
        .update({"status": "detected", "updated_at": datetime.now(timezone.utc)},
                synchronize_session=False)
    )
    db.session.commit()
    if revived:
        log.info("Match %s detected again", match_id)
    return revived == 1


# ── Reset ─────────────────────────────────────────────────────────────────────

def reset_swipes(user) -> int:
    """Clear the user's swipes and trading session. Commits.

    With RESET_REVERTS_TRADED_ITEMS set this also reverts every traded item
    in the system to available, whoever owns it. Returns the number of items
    reverted (0 when the flag is off).
    """
    from tedlist.models.swipe import Swipe

    Swipe.query.filter_by(user_id=user.id).delete(synchronize_session=False)
    user.clear_session()

    reverted = 0
    if current_app.config.get("RESET_REVERTS_TRADED_ITEMS", True):
        reverted = _revert_traded_items()
        if reverted:
            log.warning("reset-swipes by user %s reverted %d traded item(s) system-wide",
                        user.id, reverted)
    db.session.commit()
    return reverted


def revert_traded_items() -> int:
    """Administrative reset: every traded item becomes available again. Commits."""
    reverted = _revert_traded_items()
    db.session.commit()
    log.warning("Administrative reset reverted %d traded item(s)", reverted)
    return reverted


def _revert_traded_items() -> int:
    from tedlist.models.item import Item
    return (
        Item.query
        .filter(Item.status == "traded")
        .update({"status": "available"}, synchronize_session=False)
    )
