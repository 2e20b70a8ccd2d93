"""
OpenAI Vision wrapper: pure HTTP layer, no database interaction.

Two calls make up an image analysis:
  analyze_image(image)          free-text description of the pictured item
  generate_item_details(text)   structured listing fields extracted from it

Network failures and non-200 responses raise VisionError so blueprints can
report them without leaking upstream error bodies to clients.
"""
import base64
import json
import logging

import requests
from flask import current_app

log = logging.getLogger(__name__)

_URL = "https://api.openai.com/v1/chat/completions"
_SESSION = requests.Session()
_SESSION.headers.update({"Content-Type": "application/json"})
_TIMEOUT = 60

_ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert at analyzing images of items and providing detailed "
    "descriptions. Focus on identifying the item, its condition, features, "
    "brand if visible, and any text that appears in the image."
)
_DETAILS_SYSTEM_PROMPT = (
    "You are an expert at extracting structured information from text "
    "descriptions of items."
)
_DETAILS_TEMPLATE = """Based on this analysis of an item, extract the following information in JSON format:
{{
  "title": "A concise title for the item",
  "description": "A detailed description of the item (2-3 sentences)",
  "category": "One of: Electronics, Clothing, Furniture, Kitchen, Books, Toys, Sports, Home Decor, or Other",
  "condition": "One of: New, Like New, Good, Fair, Poor",
  "brand": "Brand name if identifiable, otherwise null",
  "estimatedValue": "Estimated value range in USD if possible, otherwise null",
  "keywords": ["array", "of", "relevant", "keywords"]
}}

Analysis text: {analysis}"""

CATEGORIES = ("Electronics", "Clothing", "Furniture", "Kitchen", "Books",
              "Toys", "Sports", "Home Decor", "Other")


class VisionError(Exception):
    """Raised when the vision provider is unreachable or returns an error."""
    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


# ── Internal helpers ──────────────────────────────────────────────────────────

def _post(messages: list, json_mode: bool = False) -> dict:
    api_key = current_app.config.get("OPENAI_API_KEY")
    if not api_key:
        raise VisionError("OpenAI API key is not configured")

    body = {
        "model": current_app.config.get("OPENAI_VISION_MODEL", "gpt-4o"),
        "messages": messages,
        "max_tokens": 1000,
    }
    if json_mode:
        body["response_format"] = {"type": "json_object"}

    try:
        resp = _SESSION.post(
            _URL, json=body, timeout=_TIMEOUT,
            headers={"Authorization": f"Bearer {api_key}"},
        )
    except requests.RequestException as exc:
        raise VisionError(f"Network error contacting OpenAI: {exc}") from exc

    if resp.status_code == 429:
        raise VisionError("OpenAI rate limit hit, try again shortly", status_code=429)
    if not resp.ok:
        raise VisionError(
            f"OpenAI returned {resp.status_code}: {resp.text[:200]}",
            status_code=resp.status_code,
        )
    return resp.json()


def _message_content(data: dict) -> str:
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise VisionError("No analysis results received from OpenAI")


def to_image_url(image: bytes | str, mimetype: str = "image/jpeg") -> str:
    """Accept raw bytes, a data URL or an http(s) URL; return something the
    API can fetch."""
    if isinstance(image, bytes):
        return f"data:{mimetype};base64,{base64.b64encode(image).decode('ascii')}"
    return image


# ── Public API ────────────────────────────────────────────────────────────────

def analyze_image(image: bytes | str, mimetype: str = "image/jpeg") -> dict:
    """Return {"analysis": str, "model": str, "usage": dict}."""
    messages = [
        {"role": "system", "content": _ANALYSIS_SYSTEM_PROMPT},
        {"role": "user", "content": [
            {"type": "text", "text": "Analyze this image and provide detailed information about the item shown."},
            {"type": "image_url", "image_url": {"url": to_image_url(image, mimetype)}},
        ]},
    ]
    data = _post(messages)
    log.info("Vision analysis completed (model=%s)", data.get("model"))
    return {
        "analysis": _message_content(data),
        "model":    data.get("model"),
        "usage":    data.get("usage"),
    }


def generate_item_details(analysis: dict) -> dict:
    """Structure an analysis into listing fields.

    Never raises for a bad model answer: malformed or failed structuring
    falls back to neutral defaults with the raw analysis attached.
    """
    text = analysis.get("analysis") or ""
    messages = [
        {"role": "system", "content": _DETAILS_SYSTEM_PROMPT},
        {"role": "user", "content": _DETAILS_TEMPLATE.format(analysis=text)},
    ]
    try:
        details = json.loads(_message_content(_post(messages, json_mode=True)))
        if not isinstance(details, dict):
            raise ValueError("expected a JSON object")
    except (VisionError, ValueError) as exc:
        log.warning("Structuring vision analysis failed: %s", exc)
        details = {}

    return {
        "title":          details.get("title") or "Item",
        "description":    details.get("description") or "No description available",
        "category":       details.get("category") if details.get("category") in CATEGORIES else "Other",
        "condition":      details.get("condition") or "Good",
        "brand":          details.get("brand"),
        "estimatedValue": details.get("estimatedValue"),
        "keywords":       details.get("keywords") if isinstance(details.get("keywords"), list) else [],
        "aiAnalysis":     text or "Analysis not available",
    }
