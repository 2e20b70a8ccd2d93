"""
Items blueprint: listing CRUD.

GET    /api/items          – every listed item (public)
GET    /api/items/user     – my items
POST   /api/items          – create a listing
PUT    /api/items/<id>     – update my listing
DELETE /api/items/<id>     – soft-delete my listing
"""
import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from tedlist.errors import Forbidden, NotFound, ValidationError
from tedlist.extensions import db
from tedlist.forms import validated

log = logging.getLogger(__name__)
items_bp = Blueprint("items", __name__, url_prefix="/api/items")

MAX_IMAGES = 5


# ── helpers ───────────────────────────────────────────────────────────────────

def _images_from_body(required: bool) -> list[str] | None:
    data = request.get_json(silent=True) or {}
    if "images" not in data:
        return [] if required else None
    images = data["images"]
    if not isinstance(images, list) or not all(isinstance(i, str) and i.strip() for i in images):
        raise ValidationError("images must be a list of image references",
                              fields={"images": ["Must be a list of non-empty strings."]})
    if len(images) > MAX_IMAGES:
        raise ValidationError(f"At most {MAX_IMAGES} images are allowed",
                              fields={"images": [f"At most {MAX_IMAGES} images."]})
    return [i.strip() for i in images]


def _own_item(item_id: int):
    from tedlist.models.item import Item
    item = db.session.get(Item, item_id)
    if item is None or item.status == "deleted":
        raise NotFound("Item not found")
    if item.user_id != current_user.id:
        raise Forbidden("You can only change your own items")
    return item


# ── Endpoints ─────────────────────────────────────────────────────────────────

@items_bp.route("")
def all_items():
    from tedlist.models.item import Item
    items = (
        Item.query
        .filter(Item.status != "deleted")
        .order_by(Item.created_at.desc(), Item.id.desc())
        .all()
    )
    return jsonify(success=True, items=[i.to_dict() for i in items])


@items_bp.route("/user")
@login_required
def my_items():
    from tedlist.models.item import Item
    items = (
        Item.query
        .filter(Item.user_id == current_user.id, Item.status != "deleted")
        .order_by(Item.created_at.desc(), Item.id.desc())
        .all()
    )
    return jsonify(success=True, items=[i.to_dict() for i in items])


@items_bp.route("", methods=["POST"])
@login_required
def create_item():
    from tedlist.forms.items import ItemForm
    from tedlist.models.item import Item

    form   = validated(ItemForm)
    images = _images_from_body(required=True)
    item = Item(
        user_id=current_user.id,
        title=form.title.data.strip(),
        description=form.description.data.strip(),
        condition=form.condition.data,
        type=form.type.data,
        images=images,
    )
    db.session.add(item)
    db.session.commit()
    log.info("User %s listed item %s", current_user.id, item.id)
    return jsonify(success=True, item=item.to_dict()), 201


@items_bp.route("/<int:item_id>", methods=["PUT"])
@login_required
def update_item(item_id):
    from tedlist.forms.items import ItemUpdateForm

    item = _own_item(item_id)
    form = validated(ItemUpdateForm)
    sent = set((request.get_json(silent=True) or {}).keys())

    if "title" in sent and form.title.data:
        item.title = form.title.data.strip()
    if "description" in sent and form.description.data:
        item.description = form.description.data.strip()
    if "condition" in sent:
        item.condition = form.condition.data
    if "type" in sent:
        item.type = form.type.data
    images = _images_from_body(required=False)
    if images is not None:
        item.images = images

    db.session.commit()
    return jsonify(success=True, item=item.to_dict())


@items_bp.route("/<int:item_id>", methods=["DELETE"])
@login_required
def delete_item(item_id):
    item = _own_item(item_id)
    if item.status == "traded":
        raise ValidationError("Traded items cannot be deleted")
    item.status = "deleted"
    if current_user.active_item_id == item.id:
        current_user.clear_session()
    db.session.commit()
    return jsonify(success=True, message="Item deleted successfully")
