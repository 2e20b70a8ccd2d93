"""
Configuration classes. Select one with create_app(<name>).

Every value can be overridden through an environment variable of the same
name; the defaults are suitable for local development only.
"""
import os


def _env_bool(name: str, default: bool) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///tedlist.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Bearer tokens (seconds)
    TOKEN_MAX_AGE = int(os.environ.get("TOKEN_MAX_AGE", 7 * 24 * 3600))

    # JSON forms carry no CSRF token; callers authenticate with bearer tokens
    WTF_CSRF_ENABLED = False

    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "300 per minute")
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")

    TALISMAN_ENABLED = _env_bool("TALISMAN_ENABLED", False)
    TALISMAN_CONFIG = {"force_https": False, "content_security_policy": None}

    # ── Realtime channel ─────────────────────────────────────────────────────
    WS_HEARTBEAT_ENABLED = _env_bool("WS_HEARTBEAT_ENABLED", True)
    WS_HEARTBEAT_SECONDS = int(os.environ.get("WS_HEARTBEAT_SECONDS", 30))

    # ── Rewards (teddies) ────────────────────────────────────────────────────
    SWIPE_REWARD      = 1
    MATCH_BONUS_RANGE = (5, 14)
    DEAL_BONUS_RANGE  = (5, 14)

    # reset-swipes also reverts every traded item in the system to available
    RESET_REVERTS_TRADED_ITEMS = _env_bool("RESET_REVERTS_TRADED_ITEMS", True)

    # ── External collaborators ───────────────────────────────────────────────
    OPENAI_API_KEY      = os.environ.get("OPENAI_API_KEY")
    OPENAI_VISION_MODEL = os.environ.get("OPENAI_VISION_MODEL", "gpt-4o")
    PUBLIC_ASSET_BASE_URL = os.environ.get("PUBLIC_ASSET_BASE_URL")
    MAX_CONTENT_LENGTH  = 5 * 1024 * 1024


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "testing-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RATELIMIT_ENABLED = False
    WS_HEARTBEAT_ENABLED = False
    OPENAI_API_KEY = "test-key"


class ProductionConfig(Config):
    DEBUG = False
    TALISMAN_ENABLED = _env_bool("TALISMAN_ENABLED", True)
    TALISMAN_CONFIG = {"force_https": True, "content_security_policy": None}


config = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
    "default":     DevelopmentConfig,
}
