"""Leaderboard scraping adapter for hyprd.mn.

Fetches the public leaderboard page with httpx and extracts rows with
BeautifulSoup. Everything site-specific lives here; the core only sees
RawEntry rows and the resulting Snapshot.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

import httpx
from bs4 import BeautifulSoup, Tag

from core.capture import build_snapshot
from core.codec import SNAPSHOT_ENTRY_COUNT
from core.errors import CaptureError, NoResultCapture
from core.models import RawEntry, Snapshot

LOGGER = logging.getLogger(__name__)

DEFAULT_URL = "https://hyprd.mn/leaderboards"
DEFAULT_ROW_SELECTOR = ".leaderboard>tbody>tr"


def _last_path_segment(href: str) -> str:
    return href.split("/")[-1]


def _link_cell(cell: Tag) -> Optional[tuple[str, str]]:
    """Return (last href segment, link text) for a cell holding one link."""

    link = cell.find("a")
    if link is None:
        return None
    href = link.get("href")
    if not isinstance(href, str) or not href:
        return None
    return _last_path_segment(href), link.get_text(strip=True)


def _raw_entry_from_row(row: Tag) -> Optional[RawEntry]:
    # Columns: [avatar/flag, rank, player link, run link with score]
    cells = row.find_all("td", recursive=False)
    if len(cells) < 4:
        return None

    rank = cells[1].get_text(strip=True)
    user = _link_cell(cells[2])
    run = _link_cell(cells[3])
    if not rank or user is None or run is None:
        return None

    user_id, name = user
    run_id, score = run
    return RawEntry(rank=rank, name=name, user_id=user_id, run_id=run_id, score=score)


def parse_leaderboard(html: str, row_selector: str = DEFAULT_ROW_SELECTOR, row_step: int = 2) -> List[RawEntry]:
    """Extract raw rows from the leaderboard page.

    The site interleaves each ranked row with a detail row, hence the step.
    Raises NoResultCapture if any selected row does not have the expected
    structure.
    """

    soup = BeautifulSoup(html, "html.parser")
    rows = soup.select(row_selector)[::row_step]
    entries: List[RawEntry] = []
    for index, row in enumerate(rows):
        entry = _raw_entry_from_row(row)
        if entry is None:
            raise NoResultCapture(f"Unexpected markup in leaderboard row {index}")
        entries.append(entry)
    return entries


class HyprdmnScraper:
    """Scraper adapter that satisfies the ScraperPort contract."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout_seconds: float = 30,
        row_selector: str = DEFAULT_ROW_SELECTOR,
        row_step: int = 2,
        expected_entries: int = SNAPSHOT_ENTRY_COUNT,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._url = url
        self._timeout = timeout_seconds
        self._row_selector = row_selector
        self._row_step = row_step
        self._expected_entries = expected_entries
        self._client = client
        self._clock = clock

    async def _get_html(self) -> str:
        if self._client is not None:
            response = await self._client.get(self._url, timeout=self._timeout)
        else:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                response = await client.get(self._url)
        response.raise_for_status()
        return response.text

    async def fetch(self) -> Snapshot:
        """Capture the whole leaderboard as one Snapshot."""

        # Stamp before the request so the timestamp never postdates the data.
        timestamp = int(self._clock())
        try:
            html = await self._get_html()
        except httpx.HTTPStatusError as exc:
            raise CaptureError(f"Leaderboard returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise CaptureError(f"Leaderboard request failed: {exc}") from exc

        rows = parse_leaderboard(html, self._row_selector, self._row_step)
        snapshot = build_snapshot(rows, timestamp, self._expected_entries)
        LOGGER.info("Captured %s leaderboard entries", len(snapshot.entries))
        return snapshot
