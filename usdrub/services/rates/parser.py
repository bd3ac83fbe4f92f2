"""Decimal-comma rate parsing.

The upstream feed formats values with a comma separator ("91,2345"). Only
plain decimal notation is accepted: Python-specific spellings that `float()`
would tolerate ("nan", "inf", "1_000") are rejected like any other garbage.
"""

from __future__ import annotations

import re

from usdrub.core.errors import ParseError

_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_rate(text: str) -> float:
    normalized = text.strip().replace(",", ".", 1)
    if not _NUMBER_RE.fullmatch(normalized):
        raise ParseError(f"failed to parse rate: {text!r}")
    return float(normalized)
