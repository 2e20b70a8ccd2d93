"""
Deals blueprint.

GET /api/deals/sent       – deals where I am the sender
GET /api/deals/received   – accepted/completed deals where I am the receiver
GET /api/matches          – matches involving my items
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from tedlist.utils import deal_service

deals_bp = Blueprint("deals", __name__)


@deals_bp.route("/api/deals/sent")
@login_required
def sent():
    return jsonify([d.to_dict() for d in deal_service.sent_deals(current_user.id)])


@deals_bp.route("/api/deals/received")
@login_required
def received():
    return jsonify([d.to_dict() for d in deal_service.received_deals(current_user.id)])


@deals_bp.route("/api/matches")
@login_required
def matches():
    uid = current_user.id
    return jsonify(success=True, matches=[m.to_dict(uid) for m in deal_service.matches_for(uid)])
