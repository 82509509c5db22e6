"""Persistence layer for caching reference rates.

The cache is a small key-value table with an explicit time-to-live, so the
web app does not scrape the rate source on every request. It defaults to
SQLite for local development, but accepts any SQLAlchemy-compatible URL
(e.g. PostgreSQL/MySQL) so that several app instances can share one cache.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy import Column, DateTime, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from mortgage_sim.data_models import ReferenceRate

logger = logging.getLogger(__name__)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ReferenceRateModel(Base):
    __tablename__ = "reference_rates"

    key = Column(String(64), primary_key=True)
    value = Column(String(32), nullable=False)
    observed_date = Column(String(10), nullable=False)
    raw_value = Column(String(64), nullable=False, default="")
    fetched_at = Column(DateTime, default=_utcnow, nullable=False)


class RateCache:
    """Database-backed reference-rate cache with a fixed TTL."""

    def __init__(
        self,
        url: str,
        *,
        ttl_seconds: int = 6 * 60 * 60,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def get(self, key: str) -> Optional[ReferenceRate]:
        """Return the cached rate for ``key``, or ``None`` if absent or expired."""
        with self._session_factory() as session:
            row = session.get(ReferenceRateModel, key)
            if row is None:
                return None
            if self._clock() - row.fetched_at >= self._ttl:
                logger.debug("Cached rate %s expired at %s", key, row.fetched_at + self._ttl)
                return None
            return self._to_rate(row)

    def put(self, key: str, rate: ReferenceRate) -> None:
        with self._session_factory() as session:
            row = session.get(ReferenceRateModel, key)
            if row is None:
                row = ReferenceRateModel(key=key)
                session.add(row)
            row.value = str(rate.value)
            row.observed_date = rate.date
            row.raw_value = rate.raw_value
            row.fetched_at = self._clock()
            session.commit()

    def invalidate(self, key: str) -> None:
        with self._session_factory() as session:
            row = session.get(ReferenceRateModel, key)
            if row is not None:
                session.delete(row)
                session.commit()

    def get_or_fetch(self, key: str, fetcher: Callable[[], ReferenceRate]) -> ReferenceRate:
        """Return the cached rate, calling ``fetcher`` and storing its result on a miss."""
        cached = self.get(key)
        if cached is not None:
            logger.info("Reference rate cache hit for %s", key)
            return cached
        logger.info("Reference rate cache miss for %s", key)
        rate = fetcher()
        self.put(key, rate)
        return rate

    @staticmethod
    def _to_rate(row: ReferenceRateModel) -> ReferenceRate:
        return ReferenceRate(
            value=Decimal(row.value),
            date=row.observed_date,
            raw_value=row.raw_value or "",
        )


def create_cache_from_settings(url: Optional[str], ttl_seconds: int) -> RateCache:
    return RateCache(url or "sqlite:///reference_rates.sqlite3", ttl_seconds=ttl_seconds)
