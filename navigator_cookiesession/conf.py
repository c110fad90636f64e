"""
Session Configuration defaults.

Every default can be overridden from the environment:
    SESSION_NAME, SESSION_PREFIX, SESSION_TIMEOUT, SESSION_SECRET,
    SESSION_SAVE_UNINITIALIZED, SESSION_COOKIE_SECURE,
    SESSION_COOKIE_HTTPONLY, SESSION_COOKIE_SAMESITE

SESSION_SECRET accepts a comma-separated list; the last secret signs new
cookies and all of them verify incoming cookies.
"""
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> list[str]:
    raw = os.environ.get(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


# Keys on the request used to expose the session
SESSION_KEY = "session"
SESSION_ID = "sessionId"
SESSION_STORAGE = "sessionStore"
# Key on the aiohttp Application holding the SessionConfig
SESSION_CONFIG_KEY = "navigator_cookiesession.config"

SESSION_NAME = os.environ.get("SESSION_NAME", "connect.sid")
SESSION_PREFIX = os.environ.get("SESSION_PREFIX", "sess")
# one day, used both as cookie max-age and store TTL
SESSION_TIMEOUT = int(os.environ.get("SESSION_TIMEOUT", 60 * 60 * 24))
SESSION_SECRET = _env_list("SESSION_SECRET")
SESSION_SAVE_UNINITIALIZED = _env_bool("SESSION_SAVE_UNINITIALIZED", False)

SESSION_COOKIE_PATH = "/"
SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", True)
SESSION_COOKIE_HTTPONLY = _env_bool("SESSION_COOKIE_HTTPONLY", True)
SESSION_COOKIE_SAMESITE = os.environ.get("SESSION_COOKIE_SAMESITE") or None
