"""
Deal lifecycle: accepting and declining trade offers.

accept_trade() is the only code path that moves items to traded. Both items
are flipped by one conditional UPDATE (... WHERE status = 'available'); if
it does not change exactly two rows the transaction is rolled back and
Conflict is raised, so a repeated or racing accept can never create a
second Deal.
"""
import logging

from tedlist.errors import Conflict, Forbidden, InvalidState, NotFound, ValidationError
from tedlist.extensions import db
from tedlist.utils.notification_service import dispatch_notification, notify_best_effort
from tedlist.utils.reward_service import award_teddies, deal_bonus

log = logging.getLogger(__name__)


def _load_counterpart(from_user_id: int):
    from tedlist.models.user import User
    sender = db.session.get(User, from_user_id)
    if sender is None:
        raise NotFound("User not found")
    return sender


def accept_trade(user, item_id: int, from_user_id: int):
    """Accept from_user_id's offer on item_id (an item owned by user).

    The caller must have an active trading session. item_id may be any of
    the caller's available items, since offers target listed items rather
    than only the one being offered. The counterpart's active item becomes
    the sender side of the Deal, item_id the receiver side. Commits and
    returns the Deal.
    """
    from tedlist.models.item import Item
    from tedlist.models.user import User
    from tedlist.models.deal import Deal, deal_sender_items, deal_receiver_items
    from tedlist.models.match import Match

    if from_user_id == user.id:
        raise ValidationError("You cannot trade with yourself")

    receiver_item = db.session.get(Item, item_id)
    if receiver_item is None or receiver_item.status == "deleted":
        raise NotFound("Item not found")
    if receiver_item.user_id != user.id:
        raise Forbidden("You can only accept offers on your own items")
    if receiver_item.status == "traded":
        raise Conflict("This item has already been traded")
    if not user.has_active_session:
        raise InvalidState("No active trading session")

    sender = _load_counterpart(from_user_id)
    if not sender.has_active_session:
        raise InvalidState("The other user has no active trading session")
    sender_item = db.session.get(Item, sender.active_item_id)
    if sender_item is None or sender_item.user_id != sender.id:
        raise NotFound("Sender item not found")

    sender_id, receiver_id = sender.id, user.id
    sender_item_id = sender_item.id
    pair = [sender_item_id, receiver_item.id]

    # Compare-and-swap on both items at once
    flipped = (
        Item.query
        .filter(Item.id.in_(pair), Item.status == "available")
        .update({"status": "traded"}, synchronize_session=False)
    )
    if flipped != 2:
        db.session.rollback()
        raise Conflict("One of the items has already been traded")

    bonus = deal_bonus()
    deal = Deal(sender_id=sender_id, receiver_id=receiver_id, teddies_earned=bonus)
    deal.set_status("accepted")
    db.session.add(deal)
    db.session.flush()
    db.session.execute(deal_sender_items.insert().values(
        deal_id=deal.id, item_id=sender_item_id, position=0))
    db.session.execute(deal_receiver_items.insert().values(
        deal_id=deal.id, item_id=item_id, position=0))

    match = Match.find_pair(sender_item_id, item_id)
    if match is not None:
        match.status = "accepted"

    # Sessions pointing at a traded item are over
    (
        User.query
        .filter(User.active_item_id.in_(pair))
        .update({"active_item_id": None, "session_started_at": None},
                synchronize_session=False)
    )
    award_teddies(sender_id, bonus, "Trade completed")
    award_teddies(receiver_id, bonus, "Trade completed")
    db.session.commit()
    log.info("Deal %s accepted: item %s (user %s) <-> item %s (user %s)",
             deal.id, sender_item_id, sender_id, item_id, receiver_id)

    notify_best_effort(
        sender_id, "message", item_id, receiver_id,
        "Your trade request has been accepted!",
    )
    return deal


def decline_trade(user, item_id: int, from_user_id: int) -> dict:
    """Decline from_user_id's offer. No item changes; the offerer is told.

    Only the owner of item_id may decline. Commits.
    """
    from tedlist.models.item import Item
    from tedlist.models.match import Match

    item = db.session.get(Item, item_id)
    if item is None or item.status == "deleted":
        raise NotFound("Item not found")
    if item.user_id != user.id:
        raise Forbidden("You can only decline offers on your own items")

    sender = _load_counterpart(from_user_id)
    if sender.active_item_id is not None:
        match = Match.find_pair(sender.active_item_id, item_id)
        if match is not None and match.status == "detected":
            match.status = "rejected"
            db.session.commit()

    return dispatch_notification(
        sender.id, "message", item_id, user.id,
        "Your trade request has been declined",
    )


# ── Queries ───────────────────────────────────────────────────────────────────

def sent_deals(user_id: int) -> list:
    from tedlist.models.deal import Deal
    return (
        Deal.query
        .filter_by(sender_id=user_id)
        .order_by(Deal.created_at.desc(), Deal.id.desc())
        .all()
    )


def received_deals(user_id: int) -> list:
    from tedlist.models.deal import Deal
    return (
        Deal.query
        .filter(Deal.receiver_id == user_id, Deal.status.in_(("accepted", "completed")))
        .order_by(Deal.created_at.desc(), Deal.id.desc())
        .all()
    )


def matches_for(user_id: int) -> list:
    from tedlist.models.match import Match
    return (
        Match.query
        .filter((Match.user_low_id == user_id) | (Match.user_high_id == user_id))
        .order_by(Match.created_at.desc(), Match.id.desc())
        .all()
    )
