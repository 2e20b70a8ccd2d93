"""
Admin blueprint.

POST /api/admin/items/reset-traded   – revert every traded item to available
"""
from flask import Blueprint, jsonify
from flask_login import login_required

from tedlist.utils.decorators import admin_required
from tedlist.utils.trading_service import revert_traded_items

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.route("/items/reset-traded", methods=["POST"])
@login_required
@admin_required
def reset_traded():
    reverted = revert_traded_items()
    return jsonify(success=True, revertedItems=reverted)
