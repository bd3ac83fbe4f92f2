from __future__ import annotations
from pydantic import BaseModel, Field


class RateHistoryPoint(BaseModel):
    date: str = Field(..., description="Observation date, DD.MM.YYYY")
    rate: float


class CurrentRate(BaseModel):
    currency: str
    rate: float
    date: str
