"""Client for the reference-rate service.

The service answers ``GET /`` with ``{"value": 2.45, "date": "2024-05-02",
"rawValue": "2,45%"}``. A failed request is retried once before giving up.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .data_models import ReferenceRate
from .utils import parse_rate

logger = logging.getLogger(__name__)

DEFAULT_RATE_SERVICE_URL = "http://localhost:8710/api/reference-rate"


class RateServiceError(RuntimeError):
    """The rate service could not be reached or sent an unusable answer."""


def reference_rate_from_payload(payload: dict) -> ReferenceRate:
    try:
        return ReferenceRate(
            value=parse_rate(payload["value"]),
            date=str(payload["date"]),
            raw_value=str(payload.get("rawValue", "")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise RateServiceError(f"Malformed reference rate payload: {payload!r}") from exc


def fetch_reference_rate(
    url: str = DEFAULT_RATE_SERVICE_URL,
    timeout: float = 15.0,
    retries: int = 1,
    client: Optional[httpx.Client] = None,
) -> ReferenceRate:
    """Fetch the current reference rate from the rate service."""
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout)
    try:
        last_error: Optional[Exception] = None
        for attempt in range(retries + 1):
            try:
                resp = client.get(url)
                resp.raise_for_status()
                return reference_rate_from_payload(resp.json())
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Reference rate request to %s failed (attempt %d): %s", url, attempt + 1, exc)
                last_error = exc
        raise RateServiceError(f"Could not fetch reference rate from {url}: {last_error}") from last_error
    finally:
        if owns_client:
            client.close()
