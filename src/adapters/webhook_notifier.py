"""Discord-style webhook notification adapter.

Posts each notification as the ``content`` of a webhook message.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
import urllib.error
import urllib.request
from typing import Callable

from core.errors import NotificationError

LOGGER = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 2000


def _retry_after_seconds(body: str, default: float) -> float:
    try:
        return float(json.loads(body).get("retry_after", default))
    except (ValueError, AttributeError, TypeError):
        return default


class WebhookNotifier:
    """Notifier adapter that posts messages to a webhook URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 10,
        max_attempts: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._sleep = sleep

    def _post(self, text: str) -> None:
        data = json.dumps({"content": text[:MAX_CONTENT_CHARS]}).encode("utf-8")
        for attempt in range(1, self._max_attempts + 1):
            request = urllib.request.Request(self._url, data=data, method="POST")
            request.add_header("Content-Type", "application/json")
            # Discord rejects the default urllib agent.
            request.add_header("User-Agent", "pbwatch")
            try:
                with urllib.request.urlopen(request, timeout=self._timeout):
                    return
            except urllib.error.HTTPError as e:
                body = e.read().decode("utf-8", errors="replace")
                if e.code == 429 and attempt < self._max_attempts:
                    delay = _retry_after_seconds(body, default=float(attempt))
                    LOGGER.warning("Webhook rate limited, retrying in %ss", delay)
                    self._sleep(delay)
                    continue
                raise NotificationError(f"Webhook error {e.code}: {body}") from e
            except urllib.error.URLError as e:
                raise NotificationError(f"Webhook unreachable: {e.reason}") from e
            except OSError as e:
                # Socket timeouts while reading the response are not URLErrors.
                raise NotificationError(f"Webhook request failed: {e}") from e

    async def send(self, text: str) -> None:
        """Post the notification text to the webhook."""

        await asyncio.to_thread(self._post, text)
