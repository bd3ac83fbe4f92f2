"""Lightweight HTTP GET helper for the upstream XML feed.

Uses stdlib urllib. The timeout bounds the whole request: it is passed to the
socket for connect/read and also checked as a deadline while the body is
streamed, so a slow trickle cannot hold a worker past the limit. Only
transport failures are retried (`retries`, default none); a non-2xx status is
final and reported with its code.
"""
from __future__ import annotations

import http.client
import socket
import time
import urllib.error
import urllib.request
from typing import Dict, Optional

from usdrub.core.errors import FetchError

_CHUNK_SIZE = 64 * 1024


def _expected_length(resp) -> Optional[int]:
    headers = getattr(resp, "headers", None)
    value = headers.get("Content-Length") if headers is not None else None
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def _read_until(resp, deadline: float, url: str) -> bytes:
    chunks = []
    while True:
        if time.monotonic() >= deadline:
            raise FetchError(f"timed out reading response from {url}", url=url)
        chunk = resp.read(_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    body = b"".join(chunks)
    expected = _expected_length(resp)
    if expected is not None and len(body) != expected:
        raise FetchError(
            f"incomplete response from {url}: got {len(body)} of {expected} bytes",
            url=url,
        )
    return body


def _get_once(url: str, headers: Dict[str, str], timeout: float) -> bytes:
    deadline = time.monotonic() + timeout
    try:
        req = urllib.request.Request(url, headers=headers, method="GET")
    except ValueError as e:
        raise FetchError(f"failed to create request: {e}", url=url) from e
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
            if not 200 <= resp.status < 300:
                raise FetchError(
                    f"unexpected status code: {resp.status}",
                    url=url,
                    status_code=resp.status,
                )
            return _read_until(resp, deadline, url)
    except urllib.error.HTTPError as e:
        raise FetchError(
            f"unexpected status code: {e.code}", url=url, status_code=e.code
        ) from e
    except (
        urllib.error.URLError,
        http.client.HTTPException,
        socket.timeout,
        TimeoutError,
        OSError,
    ) as e:
        raise FetchError(f"failed to fetch data: {e}", url=url) from e
    except ValueError as e:  # unknown url type etc.
        raise FetchError(f"failed to create request: {e}", url=url) from e


def get_bytes(
    url: str,
    *,
    timeout: float = 5.0,
    headers: Optional[Dict[str, str]] = None,
    retries: int = 0,
    backoff: float = 0.5,
) -> bytes:
    last_err: Optional[FetchError] = None
    for attempt in range(retries + 1):
        try:
            return _get_once(url, headers or {}, timeout)
        except FetchError as e:
            if e.status_code is not None:
                raise
            last_err = e
            if attempt == retries:
                break
            time.sleep(backoff * (2**attempt))
    assert last_err is not None
    raise last_err
