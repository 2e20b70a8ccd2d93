"""
Teddy (reward point) bookkeeping.

award_teddies() is the single write path for User.teddies: it bumps the
balance with an UPDATE expression and appends a ledger row. Adds to the
current session; caller commits.
"""
import logging
import random

from flask import current_app

from tedlist.extensions import db

log = logging.getLogger(__name__)


def award_teddies(user_id: int, amount: int, description: str) -> None:
    from tedlist.models.user import User
    from tedlist.models.teddy_transaction import TeddyTransaction

    if amount == 0:
        return
    User.query.filter_by(id=user_id).update(
        {User.teddies: User.teddies + amount}, synchronize_session=False
    )
    db.session.add(TeddyTransaction(user_id=user_id, amount=amount, description=description))
    log.debug("Awarded %d teddies to user %s (%s)", amount, user_id, description)


def swipe_reward() -> int:
    return int(current_app.config.get("SWIPE_REWARD", 1))


def match_bonus() -> int:
    low, high = current_app.config.get("MATCH_BONUS_RANGE", (5, 14))
    return random.randint(low, high)


def deal_bonus() -> int:
    low, high = current_app.config.get("DEAL_BONUS_RANGE", (5, 14))
    return random.randint(low, high)
