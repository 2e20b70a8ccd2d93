"""
Trading blueprint: sessions, swiping and trade accept/decline.

POST /api/trading/start          – offer one of my items  {itemId}
GET  /api/trading/session        – my current session (or null)
GET  /api/trading/items          – candidates to swipe on
POST /api/trading/swipe          – {itemId, direction: left|right}
POST /api/trading/accept         – {itemId, fromUserId} → Deal
POST /api/trading/decline        – {itemId, fromUserId}
POST /api/trading/reset-swipes   – clear my swipes and session
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from tedlist.forms import validated
from tedlist.utils import deal_service, trading_service

trading_bp = Blueprint("trading", __name__, url_prefix="/api/trading")


@trading_bp.route("/start", methods=["POST"])
@login_required
def start():
    from tedlist.forms.trading import StartSessionForm

    form = validated(StartSessionForm)
    item = trading_service.start_session(current_user, form.item_id.data)
    return jsonify(success=True, message="Trading session started", itemId=item.id)


@trading_bp.route("/session")
@login_required
def session():
    return jsonify(success=True, tradingSession=current_user.trading_session)


@trading_bp.route("/items")
@login_required
def candidates():
    items = trading_service.list_candidates(current_user)
    return jsonify([i.to_dict() for i in items])


@trading_bp.route("/swipe", methods=["POST"])
@login_required
def swipe():
    from tedlist.forms.trading import SwipeForm

    form   = validated(SwipeForm)
    result = trading_service.record_swipe(current_user, form.item_id.data, form.direction.data)
    return jsonify(result.to_dict())


@trading_bp.route("/accept", methods=["POST"])
@login_required
def accept():
    from tedlist.forms.trading import TradeActionForm

    form = validated(TradeActionForm)
    deal = deal_service.accept_trade(current_user, form.item_id.data, form.from_user_id.data)
    return jsonify(success=True, message="Trade accepted", deal=deal.to_dict())


@trading_bp.route("/decline", methods=["POST"])
@login_required
def decline():
    from tedlist.forms.trading import TradeActionForm

    form = validated(TradeActionForm)
    deal_service.decline_trade(current_user, form.item_id.data, form.from_user_id.data)
    return jsonify(success=True, message="Trade declined")


@trading_bp.route("/reset-swipes", methods=["POST"])
@login_required
def reset_swipes():
    reverted = trading_service.reset_swipes(current_user)
    return jsonify(
        success=True,
        message="Swipes and traded items reset successfully",
        revertedItems=reverted,
    )
