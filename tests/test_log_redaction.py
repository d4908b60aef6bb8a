from __future__ import annotations

import logging

from app import _notifier_secret_values, _RedactingFormatter

WEBHOOK_URL = "https://discord.com/api/webhooks/123/s3cr3t-token"


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("pbwatch", logging.ERROR, __file__, 1, message, None, None)


def test_webhook_url_is_masked_by_default(monkeypatch) -> None:
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK_URL)
    monkeypatch.delenv("BOT_API", raising=False)

    secrets = _notifier_secret_values({"redact": {"enabled": True}})
    formatter = _RedactingFormatter(secrets, fmt="%(message)s")

    assert secrets == [WEBHOOK_URL]
    assert formatter.format(_record(f"POST {WEBHOOK_URL} failed")) == "POST *** failed"


def test_redaction_disabled_masks_nothing(monkeypatch) -> None:
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK_URL)
    assert _notifier_secret_values({"redact": {"enabled": False}}) == []
