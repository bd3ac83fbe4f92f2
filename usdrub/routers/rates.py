"""Rate JSON endpoints.

Endpoints:
    - GET /history -> trailing window of {date, rate}; failure -> 500 {"error": ...}
    - GET /rate    -> current rate with its snapshot date; failures go through
                      the RateServiceError handler (502 upstream / 404 missing)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import List
import logging

from usdrub.core.errors import RateServiceError
from usdrub.models.rates import CurrentRate, RateHistoryPoint
from usdrub.routers.deps import get_currency_service
from usdrub.services.rates.currency_service import CurrencyService

router = APIRouter(tags=["rates"])

logger = logging.getLogger("usdrub.rates.api")


@router.get(
    "/history",
    response_model=List[RateHistoryPoint],
    summary="Rate history for the trailing window",
)
def rate_history(svc: CurrencyService = Depends(get_currency_service)):
    try:
        return svc.get_usd_rate_history()
    except RateServiceError as e:
        logger.error("error getting rate history: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e)})


@router.get("/rate", response_model=CurrentRate, summary="Current rate")
def current_rate(svc: CurrencyService = Depends(get_currency_service)) -> CurrentRate:
    return CurrentRate(
        currency=svc.currency_code,
        rate=svc.get_usd_rate(),
        date=svc.get_rate_date(),
    )
