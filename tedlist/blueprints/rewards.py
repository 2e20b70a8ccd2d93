"""Rewards blueprint – GET /api/rewards: my teddy balance and latest ledger rows."""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user

rewards_bp = Blueprint("rewards", __name__)


@rewards_bp.route("/api/rewards")
@login_required
def summary():
    from tedlist.models.teddy_transaction import TeddyTransaction
    rows = (
        TeddyTransaction.query
        .filter_by(user_id=current_user.id)
        .order_by(TeddyTransaction.created_at.desc(), TeddyTransaction.id.desc())
        .limit(20)
        .all()
    )
    return jsonify(
        success=True,
        teddies=current_user.teddies,
        transactions=[r.to_dict() for r in rows],
    )
