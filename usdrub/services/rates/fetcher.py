"""Cache-backed fetch-and-decode pipeline for the upstream XML feed.

`fetch(url, document_type)`:
    1. Cache hit on `url` -> return the already decoded document.
    2. Miss -> GET with a bounded timeout and a browser-like User-Agent.
    3. Decode the body as XML. The feed is served as windows-1251; the parser
       honours the charset declared in the XML prolog and transcodes.
    4. Store the typed document under `url` for the configured TTL.

Failures (FetchError / ParseError) propagate and never touch the cache, so a
previously cached document stays valid until its own expiry.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, Dict, Optional, Type, TypeVar
from xml.etree import ElementTree

from usdrub.core.errors import ParseError
from usdrub.services.http_client import get_bytes
from usdrub.services.ttl_cache import TTLCache
from .documents import RateDocument

logger = logging.getLogger("usdrub.rates.fetcher")

D = TypeVar("D", bound=RateDocument)

HttpGet = Callable[..., bytes]

DEFAULT_TIMEOUT = timedelta(seconds=5)
DEFAULT_TTL = timedelta(hours=1)


def decode_xml(body: bytes) -> ElementTree.Element:
    """Parse raw bytes, transcoding from the declared encoding."""
    try:
        return ElementTree.fromstring(body)
    except (ElementTree.ParseError, LookupError, UnicodeError, ValueError) as e:
        raise ParseError(f"failed to parse XML: {e}") from e


class XmlFetcher:
    def __init__(
        self,
        cache: TTLCache[RateDocument],
        *,
        http_get: Optional[HttpGet] = None,
        timeout: timedelta = DEFAULT_TIMEOUT,
        ttl: timedelta = DEFAULT_TTL,
        user_agent: str = "Mozilla/5.0",
        retries: int = 0,
    ):
        self._cache = cache
        self._http_get: HttpGet = http_get or get_bytes
        self._timeout = timeout
        self._ttl = ttl
        self._headers: Dict[str, str] = {"User-Agent": user_agent}
        self._retries = retries

    def fetch(self, url: str, document_type: Type[D]) -> D:
        cached, found = self._cache.get(url)
        if found and isinstance(cached, document_type):
            logger.debug("cache hit for %s", url)
            return cached

        logger.info("cache miss, fetching %s", url, extra={"url": url})
        body = self._http_get(
            url,
            timeout=self._timeout.total_seconds(),
            headers=self._headers,
            retries=self._retries,
        )
        document = document_type.from_xml(decode_xml(body))
        self._cache.set(url, document, self._ttl)
        return document
