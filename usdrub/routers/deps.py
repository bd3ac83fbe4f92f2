from fastapi import Request

from usdrub.core.config import Settings
from usdrub.services.rates.currency_service import CurrencyService


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with (honours create_app overrides)."""
    return request.app.state.settings


def get_currency_service(request: Request) -> CurrencyService:
    """Service instance wired by create_app (one cache per application)."""
    return request.app.state.currency_service
