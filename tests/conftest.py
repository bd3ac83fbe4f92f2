from __future__ import annotations

from datetime import date
from typing import Callable, Dict, List, Union

import pytest

from usdrub.core.config import Settings
from usdrub.core.errors import FetchError
from usdrub.services.rates.currency_service import build_currency_service
from usdrub.services.ttl_cache import TTLCache

DAILY_URL = "https://example.test/daily.xml"
DYNAMIC_URL = "https://example.test/dynamic.xml?from={start}&to={end}&id={currency_id}"
TODAY = date(2024, 1, 10)


def daily_xml(entries, rate_date: str = "10.01.2024") -> bytes:
    valutes = "".join(
        f'<Valute ID="X{i}"><NumCode>000</NumCode><CharCode>{code}</CharCode>'
        f"<Nominal>1</Nominal><Name>Валюта {code}</Name><Value>{value}</Value></Valute>"
        for i, (code, value) in enumerate(entries)
    )
    doc = (
        '<?xml version="1.0" encoding="windows-1251"?>'
        f'<ValCurs Date="{rate_date}" name="Foreign Currency Market">{valutes}</ValCurs>'
    )
    return doc.encode("windows-1251")


def dynamic_xml(records) -> bytes:
    body = "".join(
        f'<Record Date="{d}" Id="R01235"><Nominal>1</Nominal><Value>{v}</Value></Record>'
        for d, v in records
    )
    doc = (
        '<?xml version="1.0" encoding="windows-1251"?>'
        '<ValCurs ID="R01235" DateRange1="03.01.2024" DateRange2="10.01.2024" '
        f'name="Foreign Currency Market Dynamic">{body}</ValCurs>'
    )
    return doc.encode("windows-1251")


Response = Union[bytes, Exception, Callable[[], bytes]]


class FakeHttp:
    """Scripted transport; records every request it receives."""

    def __init__(self) -> None:
        self.responses: Dict[str, List[Response]] = {}
        self.calls: List[dict] = []

    def add(self, url: str, *responses: Response) -> None:
        self.responses.setdefault(url, []).extend(responses)

    def count(self, url: str) -> int:
        return sum(1 for c in self.calls if c["url"] == url)

    def __call__(self, url, *, timeout, headers, retries):
        self.calls.append(
            {"url": url, "timeout": timeout, "headers": headers, "retries": retries}
        )
        queue = self.responses.get(url)
        if not queue:
            raise FetchError(f"unexpected status code: 404", url=url, status_code=404)
        # last scripted response repeats
        resp = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(resp, Exception):
            raise resp
        if callable(resp):
            return resp()
        return resp


class ManualClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def settings() -> Settings:
    s = Settings(
        daily_rates_url=DAILY_URL,
        dynamic_rates_url=DYNAMIC_URL,
        debug=False,
    )
    s.init_post_load()
    return s


@pytest.fixture
def history_url() -> str:
    return DYNAMIC_URL.format(start="03.01.2024", end="10.01.2024", currency_id="R01235")


@pytest.fixture
def service(settings, fake_http, clock):
    return build_currency_service(
        settings,
        http_get=fake_http,
        cache=TTLCache(clock=clock),
        today=lambda: TODAY,
    )
