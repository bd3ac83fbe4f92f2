"""Smoke script for the live upstream feed.

Demonstrates:
 1. First access fetches the daily snapshot and the history series.
 2. Repeating the queries within the TTL is served from cache (transport call count unchanged).

NOTE: This is a lightweight diagnostic against the real network, not a formal test.
"""

from pprint import pprint

from usdrub.core.config import get_settings
from usdrub.core.logging import init_logging
from usdrub.services.http_client import get_bytes
from usdrub.services.rates.currency_service import build_currency_service


def run():
    settings = get_settings()
    init_logging(debug=True)
    calls = []

    def counting_get(url, **kwargs):
        calls.append(url)
        return get_bytes(url, **kwargs)

    svc = build_currency_service(settings, http_get=counting_get)
    out = {"initial": {}, "second": {}}

    for label in ("initial", "second"):
        out[label] = {
            "rate": svc.get_usd_rate(),
            "date": svc.get_rate_date(),
            "history": [p.model_dump() for p in svc.get_usd_rate_history()],
            "transport_calls": len(calls),
        }

    pprint(out)


if __name__ == "__main__":
    run()
