"""
Tests for the OpenAI Vision wrapper and the /api/vision endpoints.

The HTTP layer is mocked at tedlist.utils.vision._SESSION.post, so no
network calls are made.
"""
import io
import json

import pytest
import requests

from tedlist.utils import vision


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


def _completion(content, model="gpt-4o"):
    return FakeResponse(payload={
        "model": model,
        "usage": {"total_tokens": 42},
        "choices": [{"message": {"content": content}}],
    })


@pytest.fixture
def openai(monkeypatch):
    """Queue of responses returned by successive _SESSION.post calls."""
    queue, calls = [], []

    def fake_post(url, json=None, timeout=None, headers=None):
        calls.append(json)
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(vision._SESSION, "post", fake_post)
    return queue, calls


DETAILS = {
    "title": "Vintage teddy bear",
    "description": "A well loved brown teddy bear.",
    "category": "Toys",
    "condition": "Good",
    "brand": "Steiff",
    "estimatedValue": "$20-40",
    "keywords": ["teddy", "bear"],
}


# ── Wrapper ───────────────────────────────────────────────────────────────────

class TestVisionWrapper:

    def test_analyze_bytes_sends_data_url(self, app, openai):
        queue, calls = openai
        queue.append(_completion("A brown teddy bear"))
        with app.app_context():
            result = vision.analyze_image(b"\x89PNG", mimetype="image/png")
        assert result["analysis"] == "A brown teddy bear"
        assert result["model"] == "gpt-4o"
        url = calls[0]["messages"][1]["content"][1]["image_url"]["url"]
        assert url.startswith("data:image/png;base64,")

    def test_generate_details(self, app, openai):
        queue, calls = openai
        queue.append(_completion(json.dumps(DETAILS)))
        with app.app_context():
            details = vision.generate_item_details({"analysis": "A brown teddy bear"})
        assert details["title"] == "Vintage teddy bear"
        assert details["category"] == "Toys"
        assert details["keywords"] == ["teddy", "bear"]
        assert details["aiAnalysis"] == "A brown teddy bear"
        assert calls[0]["response_format"] == {"type": "json_object"}

    def test_generate_details_falls_back_on_bad_json(self, app, openai):
        queue, _ = openai
        queue.append(_completion("not json at all"))
        with app.app_context():
            details = vision.generate_item_details({"analysis": "Something"})
        assert details["title"] == "Item"
        assert details["description"] == "No description available"
        assert details["category"] == "Other"
        assert details["condition"] == "Good"
        assert details["keywords"] == []

    def test_unknown_category_becomes_other(self, app, openai):
        queue, _ = openai
        queue.append(_completion(json.dumps(dict(DETAILS, category="Spaceships"))))
        with app.app_context():
            assert vision.generate_item_details({"analysis": "x"})["category"] == "Other"

    def test_rate_limit(self, app, openai):
        queue, _ = openai
        queue.append(FakeResponse(status_code=429))
        with app.app_context():
            with pytest.raises(vision.VisionError) as exc:
                vision.analyze_image("https://example.com/a.jpg")
        assert exc.value.status_code == 429

    def test_network_error(self, app, openai):
        queue, _ = openai
        queue.append(requests.ConnectionError("boom"))
        with app.app_context():
            with pytest.raises(vision.VisionError):
                vision.analyze_image("https://example.com/a.jpg")

    def test_missing_api_key(self, app, openai):
        app.config["OPENAI_API_KEY"] = None
        with app.app_context():
            with pytest.raises(vision.VisionError):
                vision.analyze_image("https://example.com/a.jpg")


# ── Endpoints ─────────────────────────────────────────────────────────────────

class TestVisionEndpoints:

    def test_analyze_upload(self, client, make_user, openai):
        queue, _ = openai
        queue.extend([_completion("A brown teddy bear"), _completion(json.dumps(DETAILS))])
        user = make_user()
        resp = client.post(
            "/api/vision/analyze",
            data={"image": (io.BytesIO(b"\xff\xd8\xff"), "bear.jpg", "image/jpeg")},
            content_type="multipart/form-data",
            headers=user.headers,
        )
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["title"] == "Vintage teddy bear"
        assert data["aiAnalysis"] == "A brown teddy bear"

    def test_analyze_rejects_non_images(self, client, make_user, openai):
        user = make_user()
        resp = client.post(
            "/api/vision/analyze",
            data={"image": (io.BytesIO(b"hello"), "notes.txt", "text/plain")},
            content_type="multipart/form-data",
            headers=user.headers,
        )
        assert resp.status_code == 400

    def test_analyze_url(self, client, make_user, openai):
        queue, calls = openai
        queue.extend([_completion("A lamp"), _completion(json.dumps(DETAILS))])
        user = make_user()
        resp = client.post("/api/vision/analyze-url",
                           json={"imageUrl": "https://example.com/lamp.jpg"},
                           headers=user.headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["imageUrl"] == "https://example.com/lamp.jpg"
        assert calls[0]["messages"][1]["content"][1]["image_url"]["url"] == "https://example.com/lamp.jpg"

    def test_upstream_failure_is_503(self, client, make_user, openai):
        queue, _ = openai
        queue.append(FakeResponse(status_code=500, text="upstream exploded"))
        user = make_user()
        resp = client.post("/api/vision/analyze-url",
                           json={"imageUrl": "https://example.com/lamp.jpg"},
                           headers=user.headers)
        assert resp.status_code == 503
        assert "exploded" not in resp.get_json()["message"]
