"""
Vision blueprint: turn an item photo into listing fields.

POST /api/vision/analyze       – multipart upload, field "image"
POST /api/vision/analyze-url   – {imageUrl}
"""
import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required

from tedlist.errors import Unavailable, ValidationError
from tedlist.extensions import limiter
from tedlist.utils.vision import VisionError, analyze_image, generate_item_details

log = logging.getLogger(__name__)
vision_bp = Blueprint("vision", __name__, url_prefix="/api/vision")


def _details_for(image, mimetype: str = "image/jpeg") -> dict:
    try:
        analysis = analyze_image(image, mimetype=mimetype)
    except VisionError as exc:
        log.warning("Vision analysis failed: %s", exc)
        raise Unavailable("Image analysis is unavailable right now") from exc
    return generate_item_details(analysis)


@vision_bp.route("/analyze", methods=["POST"])
@login_required
@limiter.limit("30 per hour")
def analyze():
    upload = request.files.get("image")
    if upload is None or not upload.filename:
        raise ValidationError("No image file provided")
    if not (upload.mimetype or "").startswith("image/"):
        raise ValidationError("Only image files are allowed")

    details = _details_for(upload.read(), mimetype=upload.mimetype)
    return jsonify(success=True, message="Image analyzed successfully", data=details)


@vision_bp.route("/analyze-url", methods=["POST"])
@login_required
@limiter.limit("30 per hour")
def analyze_url():
    data = request.get_json(silent=True) or {}
    image_url = (data.get("imageUrl") or "").strip()
    if not image_url.startswith(("http://", "https://")):
        raise ValidationError("No image URL provided",
                              fields={"imageUrl": ["Must be an http(s) URL."]})

    details = _details_for(image_url)
    details["imageUrl"] = image_url
    return jsonify(success=True, message="Image analyzed successfully", data=details)
