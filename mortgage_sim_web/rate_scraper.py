"""Scraper for the Euribor reference rate.

Downloads the Euribor page of a Spanish mortgage comparison site and reads
the figure shown in its "Euribor today" box (``.euribor-today .value``).
"""

from __future__ import annotations

import logging
from datetime import date
from html.parser import HTMLParser
from typing import List, Optional

import httpx

from mortgage_sim.data_models import ReferenceRate
from mortgage_sim.utils import parse_rate

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                  "AppleWebKit/537.36 (KHTML, like Gecko) "
                  "Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "es-ES,es;q=0.8,en-US;q=0.5,en;q=0.3",
    "Cache-Control": "max-age=0",
}

CONTAINER_CLASS = "euribor-today"
VALUE_CLASS = "value"


class RateScrapingError(RuntimeError):
    """The page could not be fetched or did not contain a rate."""


class _EuriborValueParser(HTMLParser):
    """Collect the text of the first ``span.value`` inside ``.euribor-today``."""

    def __init__(self) -> None:
        super().__init__()
        self._container_tag: Optional[str] = None
        self._container_depth = 0
        self._capturing = False
        self._chunks: List[str] = []
        self.found = False

    @property
    def value(self) -> str:
        return "".join(self._chunks).strip()

    def handle_starttag(self, tag, attrs):
        classes = (dict(attrs).get("class") or "").split()
        if self._container_tag is None:
            if CONTAINER_CLASS in classes:
                self._container_tag = tag
                self._container_depth = 1
            return
        if tag == self._container_tag:
            self._container_depth += 1
        if not self.found and tag == "span" and VALUE_CLASS in classes:
            self._capturing = True

    def handle_endtag(self, tag):
        if self._capturing and tag == "span":
            self._capturing = False
            self.found = True
        if self._container_tag is not None and tag == self._container_tag:
            self._container_depth -= 1
            if self._container_depth == 0:
                self._container_tag = None

    def handle_data(self, data):
        if self._capturing:
            self._chunks.append(data)


def extract_rate_text(html: str) -> str:
    """Return the raw rate text (e.g. ``"2,451%"``) found in ``html``."""
    parser = _EuriborValueParser()
    parser.feed(html)
    parser.close()
    if not parser.value:
        raise RateScrapingError("Could not find the Euribor value on the page")
    return parser.value


def scrape_reference_rate(
    url: str,
    client: Optional[httpx.Client] = None,
    timeout: float = 15.0,
    today: Optional[date] = None,
) -> ReferenceRate:
    """Fetch ``url`` and return the Euribor value it shows, dated today."""
    logger.info("Scraping reference rate from %s", url)
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        resp = client.get(url, headers=BROWSER_HEADERS)
        resp.raise_for_status()
        html = resp.text
    except httpx.HTTPError as exc:
        logger.warning("Reference rate request failed: %s", exc)
        raise RateScrapingError(f"Request to {url} failed: {exc}") from exc
    finally:
        if owns_client:
            client.close()

    raw_value = extract_rate_text(html)
    try:
        value = parse_rate(raw_value)
    except ValueError as exc:
        raise RateScrapingError(f"Unreadable Euribor value: {raw_value!r}") from exc

    observed = (today or date.today()).isoformat()
    logger.info("Reference rate obtained: %s (%s)", value, observed)
    return ReferenceRate(value=value, date=observed, raw_value=raw_value)
