import threading
from datetime import timedelta

import pytest

from usdrub.core.errors import FetchError, ParseError
from usdrub.services.rates.documents import DailySnapshot, HistoricalSeries
from usdrub.services.rates.fetcher import XmlFetcher, decode_xml
from usdrub.services.ttl_cache import TTLCache

from .conftest import DAILY_URL, daily_xml, dynamic_xml


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


@pytest.fixture
def fetcher(cache, fake_http):
    return XmlFetcher(cache, http_get=fake_http)


def test_decodes_windows_1251_snapshot(fetcher, fake_http):
    fake_http.add(DAILY_URL, daily_xml([("EUR", "100,00"), ("USD", "91,23")]))
    doc = fetcher.fetch(DAILY_URL, DailySnapshot)
    assert doc.date == "10.01.2024"
    assert [(e.char_code, e.raw_value) for e in doc.entries] == [
        ("EUR", "100,00"),
        ("USD", "91,23"),
    ]


def test_decodes_history_series(fetcher, fake_http):
    url = "https://example.test/dyn"
    fake_http.add(url, dynamic_xml([("01.01.2024", "91,00"), ("02.01.2024", "92,00")]))
    doc = fetcher.fetch(url, HistoricalSeries)
    assert [(r.date, r.raw_value) for r in doc.entries] == [
        ("01.01.2024", "91,00"),
        ("02.01.2024", "92,00"),
    ]


def test_second_fetch_within_ttl_hits_cache(fetcher, fake_http):
    fake_http.add(DAILY_URL, daily_xml([("USD", "91,23")]))
    first = fetcher.fetch(DAILY_URL, DailySnapshot)
    second = fetcher.fetch(DAILY_URL, DailySnapshot)
    assert second is first
    assert fake_http.count(DAILY_URL) == 1


def test_refetches_after_ttl(fetcher, fake_http, clock):
    fake_http.add(
        DAILY_URL,
        daily_xml([("USD", "91,23")], rate_date="10.01.2024"),
        daily_xml([("USD", "92,00")], rate_date="11.01.2024"),
    )
    fetcher.fetch(DAILY_URL, DailySnapshot)
    clock.advance(timedelta(hours=1).total_seconds())
    doc = fetcher.fetch(DAILY_URL, DailySnapshot)
    assert doc.date == "11.01.2024"
    assert fake_http.count(DAILY_URL) == 2


def test_request_uses_timeout_and_user_agent(fetcher, fake_http):
    fake_http.add(DAILY_URL, daily_xml([]))
    fetcher.fetch(DAILY_URL, DailySnapshot)
    call = fake_http.calls[0]
    assert call["timeout"] == 5.0
    assert call["headers"]["User-Agent"] == "Mozilla/5.0"
    assert call["retries"] == 0


@pytest.mark.parametrize(
    "failure",
    [
        FetchError("unexpected status code: 503", url=DAILY_URL, status_code=503),
        FetchError("failed to fetch data: timed out", url=DAILY_URL),
    ],
)
def test_failed_fetch_leaves_cache_untouched(cache, fake_http, clock, failure):
    fetcher = XmlFetcher(cache, http_get=fake_http)
    fake_http.add(DAILY_URL, daily_xml([("USD", "91,23")]), failure)
    cached = fetcher.fetch(DAILY_URL, DailySnapshot)

    clock.advance(3600)  # expire; next fetch hits the failure
    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch(DAILY_URL, DailySnapshot)
    assert excinfo.value is failure
    assert cache.get(DAILY_URL) == (None, False)

    # a failure on a cold key does not populate it either
    with pytest.raises(FetchError):
        fetcher.fetch("https://example.test/other", DailySnapshot)
    assert cache.get("https://example.test/other") == (None, False)
    assert len(cache) == 1
    assert cached.date == "10.01.2024"


def test_failure_while_cached_entry_is_fresh_is_not_observed(cache, fake_http):
    fetcher = XmlFetcher(cache, http_get=fake_http)
    fake_http.add(DAILY_URL, daily_xml([("USD", "91,23")]), FetchError("boom", status_code=500))
    first = fetcher.fetch(DAILY_URL, DailySnapshot)
    assert fetcher.fetch(DAILY_URL, DailySnapshot) is first
    assert cache.get(DAILY_URL) == (first, True)


def test_status_code_is_reported(fetcher, fake_http):
    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.test/unknown", DailySnapshot)
    assert excinfo.value.status_code == 404
    assert "404" in str(excinfo.value)


def test_malformed_xml_raises_parse_error(fetcher, fake_http, cache):
    fake_http.add(DAILY_URL, b"<ValCurs><Valute>")
    with pytest.raises(ParseError):
        fetcher.fetch(DAILY_URL, DailySnapshot)
    assert cache.get(DAILY_URL) == (None, False)


@pytest.mark.parametrize("charset", [b"x-no-such-charset", b"shift_jis"])
def test_unknown_charset_raises_parse_error(charset):
    body = b'<?xml version="1.0" encoding="' + charset + b'"?><ValCurs Date="1"/>'
    with pytest.raises(ParseError):
        decode_xml(body)


def test_concurrent_cold_fetches_each_reach_upstream(fetcher, fake_http, cache):
    callers = 2
    barrier = threading.Barrier(callers, timeout=5)
    body = daily_xml([("USD", "91,23")])

    def slow_response():
        # both callers are inside the transport before either stores a result
        barrier.wait()
        return body

    fake_http.add(DAILY_URL, slow_response)
    results = []
    threads = [
        threading.Thread(
            target=lambda: results.append(fetcher.fetch(DAILY_URL, DailySnapshot))
        )
        for _ in range(callers)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert len(results) == callers
    assert fake_http.count(DAILY_URL) == callers
    cached, found = cache.get(DAILY_URL)
    assert found and cached in results
