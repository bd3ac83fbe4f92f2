import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from usdrub.core.config import Settings
from usdrub.core.errors import RateServiceError
from usdrub.routers.deps import get_app_settings, get_currency_service
from usdrub.services.rates.currency_service import CurrencyService

router = APIRouter(tags=["ui"])

logger = logging.getLogger("usdrub.ui")


@router.get("/", response_class=HTMLResponse)
def ui_home(
    request: Request,
    svc: CurrencyService = Depends(get_currency_service),
    settings: Settings = Depends(get_app_settings),
):
    """Current rate page; upstream failures degrade to 0 / empty date."""
    try:
        course = svc.get_usd_rate()
    except RateServiceError as e:
        logger.error("error getting %s rate: %s", svc.currency_code, e)
        course = 0.0

    try:
        rate_date = svc.get_rate_date()
    except RateServiceError as e:
        logger.error("error getting rate date: %s", e)
        rate_date = ""

    context = {
        "course": course,
        "date": rate_date,
        "currency": svc.currency_code,
        "version": settings.version,
    }
    return request.app.state.templates.TemplateResponse(request, "index.html", context)
