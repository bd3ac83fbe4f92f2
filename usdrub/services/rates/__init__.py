"""Upstream rate acquisition: documents, parsing, cached fetch, queries."""

from .currency_service import CurrencyService, build_currency_service
from .documents import DailyEntry, DailySnapshot, HistoricalSeries, HistoryRecord
from .fetcher import XmlFetcher
from .parser import parse_rate

__all__ = [
    "CurrencyService",
    "build_currency_service",
    "DailyEntry",
    "DailySnapshot",
    "HistoricalSeries",
    "HistoryRecord",
    "XmlFetcher",
    "parse_rate",
]
