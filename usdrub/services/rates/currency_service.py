"""Currency queries answered from the upstream feed.

Queries:
    - get_usd_rate()          RUB per 1 USD from today's snapshot
    - get_rate_date()         the snapshot's Date attribute, verbatim
    - get_usd_rate_history()  trailing window of daily observations

The two snapshot queries each go through the fetcher; the second one inside
the TTL window is a cache hit. History is best effort per record: values that
do not parse are dropped (and logged) instead of failing the whole series.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable, List, Optional

from usdrub.core.config import Settings
from usdrub.core.errors import NotFoundError, ParseError
from usdrub.models.rates import RateHistoryPoint
from usdrub.services.ttl_cache import TTLCache
from .documents import DailySnapshot, HistoricalSeries, RateDocument
from .fetcher import HttpGet, XmlFetcher
from .parser import parse_rate

logger = logging.getLogger("usdrub.rates.service")

DATE_FORMAT = "%d.%m.%Y"


class CurrencyService:
    def __init__(
        self,
        fetcher: XmlFetcher,
        *,
        daily_url: str,
        dynamic_url: str,
        currency_code: str = "USD",
        currency_id: str = "R01235",
        history_days: int = 7,
        today: Optional[Callable[[], date]] = None,
    ):
        self._fetcher = fetcher
        self._daily_url = daily_url
        self._dynamic_url = dynamic_url
        self._currency_code = currency_code
        self._currency_id = currency_id
        self._history_days = history_days
        self._today = today or date.today

    @property
    def currency_code(self) -> str:
        return self._currency_code

    def get_daily_rates(self) -> DailySnapshot:
        return self._fetcher.fetch(self._daily_url, DailySnapshot)

    def get_usd_rate(self) -> float:
        snapshot = self.get_daily_rates()
        for entry in snapshot.entries:
            # first match wins; upstream lists each code once
            if entry.char_code == self._currency_code:
                return parse_rate(entry.raw_value)
        raise NotFoundError(f"{self._currency_code} rate not found")

    def get_rate_date(self) -> str:
        return self.get_daily_rates().date

    def history_url(self) -> str:
        end = self._today()
        start = end - timedelta(days=self._history_days)
        return self._dynamic_url.format(
            start=start.strftime(DATE_FORMAT),
            end=end.strftime(DATE_FORMAT),
            currency_id=self._currency_id,
        )

    def get_usd_rate_history(self) -> List[RateHistoryPoint]:
        series = self._fetcher.fetch(self.history_url(), HistoricalSeries)
        history: List[RateHistoryPoint] = []
        for record in series.entries:
            try:
                rate = parse_rate(record.raw_value)
            except ParseError:
                logger.warning(
                    "skipping history record %s: %r", record.date, record.raw_value
                )
                continue
            history.append(RateHistoryPoint(date=record.date, rate=rate))
        return history


def build_currency_service(
    settings: Settings,
    *,
    http_get: Optional[HttpGet] = None,
    cache: Optional[TTLCache[RateDocument]] = None,
    today: Optional[Callable[[], date]] = None,
) -> CurrencyService:
    """Wire cache -> fetcher -> service from settings.

    Each call builds an independent cache unless one is passed in.
    """
    fetcher = XmlFetcher(
        cache if cache is not None else TTLCache(),
        http_get=http_get,
        timeout=timedelta(seconds=settings.http_timeout_seconds),
        ttl=timedelta(seconds=settings.rates_cache_ttl_seconds),
        user_agent=settings.http_user_agent,
        retries=settings.http_retries,
    )
    return CurrencyService(
        fetcher,
        daily_url=settings.daily_rates_url,
        dynamic_url=settings.dynamic_rates_url,
        currency_code=settings.currency_code,
        currency_id=settings.currency_id,
        history_days=settings.history_days,
        today=today,
    )
