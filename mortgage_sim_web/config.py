"""Runtime settings for the web app, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_RATE_SOURCE_URL = "https://www.iahorro.com/euribor"
DEFAULT_CACHE_URL = "sqlite:///reference_rates.sqlite3"
DEFAULT_CORS_ORIGIN = "https://mortgage-simulate.netlify.app"


@dataclass(frozen=True)
class Settings:
    rate_source_url: str = DEFAULT_RATE_SOURCE_URL
    cache_url: str = DEFAULT_CACHE_URL
    cache_ttl_seconds: int = 6 * 60 * 60
    cors_origin: str = DEFAULT_CORS_ORIGIN
    log_level: str = "INFO"
    http_timeout: float = 15.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            rate_source_url=env.get("MORTGAGE_RATE_SOURCE_URL", DEFAULT_RATE_SOURCE_URL),
            cache_url=env.get("MORTGAGE_RATE_CACHE_URL", DEFAULT_CACHE_URL),
            cache_ttl_seconds=int(env.get("MORTGAGE_RATE_CACHE_TTL", 6 * 60 * 60)),
            cors_origin=env.get("MORTGAGE_CORS_ORIGIN", DEFAULT_CORS_ORIGIN),
            log_level=env.get("MORTGAGE_LOG_LEVEL", "INFO").upper(),
            http_timeout=float(env.get("MORTGAGE_HTTP_TIMEOUT", 15.0)),
        )
