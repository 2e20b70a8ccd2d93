"""
Object-storage helpers.

Items store image references (keys such as "uploads/abc.jpg" or absolute
URLs). public_url() turns a reference into something a client can fetch:
absolute URLs pass through, keys are joined onto PUBLIC_ASSET_BASE_URL
(the bucket's public URL) or, without one, served from /uploads/.
"""
from flask import current_app, has_app_context


def public_url(ref: str) -> str:
    if not ref:
        return ref
    if ref.startswith(("http://", "https://", "data:")):
        return ref
    key = ref.lstrip("/")
    if key.startswith("uploads/"):
        key = key[len("uploads/"):]
    base = current_app.config.get("PUBLIC_ASSET_BASE_URL") if has_app_context() else None
    if base:
        return f"{base.rstrip('/')}/uploads/{key}"
    return f"/uploads/{key}"
