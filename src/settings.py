"""Static configuration for pbwatch.

All user-editable settings (leaderboard, polling, cache, notifications,
logging) live in a single JSON file for quick edits without touching Python.
Secrets (webhook URL, bot token) come from the environment instead.
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Settings are loaded from config.json so users can point at another page,
# change the interval or switch notifiers without editing code.
CONFIG_PATH = os.environ.get("PBWATCH_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Leaderboard page and extraction settings for the scraper adapter.
_leaderboard = _CONFIG.get("leaderboard", {})
LEADERBOARD_URL = _leaderboard.get("url", "https://hyprd.mn/leaderboards")
LEADERBOARD_TIMEOUT_SECONDS = float(_leaderboard.get("timeout_seconds", 30))
LEADERBOARD_ROW_SELECTOR = _leaderboard.get("row_selector", ".leaderboard>tbody>tr")
LEADERBOARD_ROW_STEP = int(_leaderboard.get("row_step", 2))

# Polling cadence; the first poll happens one interval after startup.
_polling = _CONFIG.get("polling", {})
POLL_INTERVAL_SECONDS = int(_polling.get("interval_seconds", 600))

# Snapshot cache location and when to overwrite it.
# - PERSIST_POLICY: "always" (every capture) or "on_change" (only with new PBs)
_cache = _CONFIG.get("cache", {})
CACHE_PATH = _resolve_path(_cache.get("path", "cache"))
PERSIST_POLICY = _cache.get("persist_policy", "always")

# Notification method switches adapters without changing core logic.
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "webhook")
# Bot chat id is only required when notification_method=bot.
BOT_CHAT_ID = _notifications.get("bot_chat_id")
NOTIFICATION_TIMEOUT_SECONDS = float(_notifications.get("timeout_seconds", 10))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
