"""Typed shapes of the upstream XML documents.

Both endpoints answer with a `<ValCurs>` root:

    daily snapshot   <ValCurs Date="18.10.2026">
                       <Valute ID="R01235"><CharCode>USD</CharCode>...<Value>81,1540</Value></Valute>
                     </ValCurs>
    history series   <ValCurs ID="R01235" DateRange1=".." DateRange2="..">
                       <Record Date="11.10.2026" Id="R01235"><Value>81,0000</Value></Record>
                     </ValCurs>

Values stay raw (decimal comma) here; they only become floats through
`parse_rate`. Documents are frozen so cached instances can be shared freely.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union
from xml.etree.ElementTree import Element


def _text(element: Element, tag: str) -> str:
    return (element.findtext(tag) or "").strip()


@dataclass(frozen=True)
class DailyEntry:
    char_code: str
    raw_value: str


@dataclass(frozen=True)
class DailySnapshot:
    date: str
    entries: Tuple[DailyEntry, ...]

    @classmethod
    def from_xml(cls, root: Element) -> "DailySnapshot":
        return cls(
            date=root.get("Date", ""),
            entries=tuple(
                DailyEntry(char_code=_text(v, "CharCode"), raw_value=_text(v, "Value"))
                for v in root.iter("Valute")
            ),
        )


@dataclass(frozen=True)
class HistoryRecord:
    date: str
    raw_value: str


@dataclass(frozen=True)
class HistoricalSeries:
    entries: Tuple[HistoryRecord, ...]

    @classmethod
    def from_xml(cls, root: Element) -> "HistoricalSeries":
        return cls(
            entries=tuple(
                HistoryRecord(date=r.get("Date", ""), raw_value=_text(r, "Value"))
                for r in root.iter("Record")
            )
        )


RateDocument = Union[DailySnapshot, HistoricalSeries]
