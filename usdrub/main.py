import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import health, rates, ui
from .services.rates.currency_service import CurrencyService, build_currency_service


def create_app(
    settings_override: Settings | None = None,
    currency_service: CurrencyService | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    currency_service: pre-wired service (e.g. with a fake transport); by default
    a fresh cache/fetcher/service chain is built from settings.
    """
    settings = settings_override or get_settings()
    if settings.templates_dir is None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.currency_service = currency_service or build_currency_service(settings)
    app.state.templates = Jinja2Templates(directory=str(settings.templates_dir))

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(errors.RateServiceError, errors.rate_service_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(ui.router)
    app.include_router(rates.router)

    logging.getLogger("usdrub").info(
        "application ready (upstream %s)", settings.daily_rates_url
    )
    return app


app = create_app()
