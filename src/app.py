"""Application entry point for the pbwatch leaderboard watcher."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.file_cache import FileSnapshotCache
from adapters.hyprdmn_scraper import HyprdmnScraper
from adapters.telegram_bot_notifier import TelegramBotNotifier
from adapters.webhook_notifier import WebhookNotifier
from core.codec import format_f32
from core.config import WatchConfig
from core.errors import CaptureError, DecodeError
from core.ports import NotifierPort
from core.watcher import LeaderboardWatcher

NAME = "PBWATCH"
FONT = "tarty-1"

# Environment variables holding notifier credentials.
NOTIFIER_SECRET_ENV_VARS = ("WEBHOOK_URL", "BOT_API")


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _notifier_secret_values(config: dict) -> list[str]:
    """Return the notifier secrets to mask in log output.

    Webhook URLs embed their token in the path, so any log line that echoes
    the URL would leak it verbatim.
    """

    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", NOTIFIER_SECRET_ENV_VARS):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _notifier_secret_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/pbwatch.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    # httpx logs every request at INFO, which drowns the cycle summaries.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    logging.basicConfig(level=level, handlers=handlers)


def _build_notifier() -> NotifierPort:
    # Select the notification adapter based on configuration to keep the core
    # watcher independent from delivery details.
    if settings.NOTIFICATION_METHOD == "webhook":
        webhook_url = os.getenv("WEBHOOK_URL")
        if not webhook_url:
            raise RuntimeError("WEBHOOK_URL is required when notification_method=webhook")
        return WebhookNotifier(webhook_url, timeout=settings.NOTIFICATION_TIMEOUT_SECONDS)
    if settings.NOTIFICATION_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when notification_method=bot")
        if not settings.BOT_CHAT_ID:
            raise RuntimeError("notifications.bot_chat_id is required for bot notifications")
        return TelegramBotNotifier(
            bot_token=bot_token,
            chat_id=str(settings.BOT_CHAT_ID),
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
    raise RuntimeError("notification_method must be 'webhook' or 'bot'")


def _build_watcher() -> LeaderboardWatcher:
    scraper = HyprdmnScraper(
        url=settings.LEADERBOARD_URL,
        timeout_seconds=settings.LEADERBOARD_TIMEOUT_SECONDS,
        row_selector=settings.LEADERBOARD_ROW_SELECTOR,
        row_step=settings.LEADERBOARD_ROW_STEP,
    )
    cache = FileSnapshotCache(settings.CACHE_PATH)
    notifier = _build_notifier()
    logging.getLogger(__name__).info("Selected notification method - %s", settings.NOTIFICATION_METHOD)
    config = WatchConfig(
        interval_seconds=settings.POLL_INTERVAL_SECONDS,
        persist_policy=settings.PERSIST_POLICY,
    )
    return LeaderboardWatcher(scraper=scraper, cache=cache, notifier=notifier, config=config)


async def _watch(watcher: LeaderboardWatcher, interval_seconds: int, once: bool) -> None:
    logger = logging.getLogger(__name__)
    await watcher.bootstrap()

    if once:
        await watcher.run_cycle()
        return

    logger.info("Polling every %ss", interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await watcher.run_cycle()
        except Exception:
            logger.exception("Error while running a polling cycle")


def _run(once: bool = False) -> None:
    _print_banner()
    load_dotenv()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting pbwatch")
    watcher = _build_watcher()

    try:
        asyncio.run(_watch(watcher, settings.POLL_INTERVAL_SECONDS, once))
    except CaptureError as exc:
        # Without a baseline there is nothing to diff against.
        logger.critical("Could not capture an initial leaderboard: %s", exc)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        logger.info("Stopped")


def _inspect(top: int) -> None:
    cache = FileSnapshotCache(settings.CACHE_PATH)
    try:
        snapshot = cache.load()
    except DecodeError as exc:
        print(f"No usable cache: {exc}")
        raise SystemExit(1) from exc

    captured = datetime.fromtimestamp(snapshot.timestamp, tz=timezone.utc)
    print(f"Cache: {cache.path}")
    print(f"Captured: {captured.astimezone().strftime('%H:%M:%S %d-%m-%Y')}")
    print(f"Entries: {len(snapshot.entries)}")
    for entry in snapshot.entries[:top]:
        print(f"#{entry.rank} | {entry.name} | {format_f32(entry.score)} | run {entry.run_id}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="pbwatch")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the watcher")
    subparsers.add_parser("once", help="Load the baseline and run a single cycle now")
    inspect_parser = subparsers.add_parser("inspect", help="Show the cached leaderboard")
    inspect_parser.add_argument("--top", type=int, default=10, help="Number of entries to print")

    args = parser.parse_args(argv)
    if args.command == "inspect":
        _inspect(args.top)
        return
    _run(once=args.command == "once")


if __name__ == "__main__":
    main(sys.argv[1:])
