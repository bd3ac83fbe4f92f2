from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, PORT, HTTP_TIMEOUT_SECONDS, RATES_CACHE_TTL_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "USD/RUB Rate"
    debug: bool = False
    version: str = "0.1.0"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    templates_dir: Optional[Path] = None  # derived if not provided

    # Upstream feed (Central Bank of Russia)
    daily_rates_url: str = "https://www.cbr.ru/scripts/XML_daily.asp"
    # {start} / {end} are filled with DD.MM.YYYY dates, {currency_id} with currency_id
    dynamic_rates_url: str = (
        "https://www.cbr.ru/scripts/XML_dynamic.asp"
        "?date_req1={start}&date_req2={end}&VAL_NM_RQ={currency_id}"
    )
    currency_code: str = "USD"
    currency_id: str = "R01235"  # upstream identifier for USD
    history_days: int = 7

    # HTTP / caching
    http_timeout_seconds: float = 5.0
    http_user_agent: str = "Mozilla/5.0"  # upstream rejects requests without one
    http_retries: int = 0
    rates_cache_ttl_seconds: int = 3600  # 1 hour

    def init_post_load(self) -> None:
        """Finalize derived fields and validate values."""
        if self.templates_dir is None:
            self.templates_dir = Path(__file__).resolve().parent.parent / "templates"
        if self.http_timeout_seconds <= 0:
            raise ValueError("http_timeout_seconds must be positive")
        if self.rates_cache_ttl_seconds <= 0:
            raise ValueError("rates_cache_ttl_seconds must be positive")
        if self.http_retries < 0:
            raise ValueError("http_retries cannot be negative")
        if self.history_days < 0:
            raise ValueError("history_days cannot be negative")
        for placeholder in ("{start}", "{end}"):
            if placeholder not in self.dynamic_rates_url:
                raise ValueError(
                    f"dynamic_rates_url must contain the '{placeholder}' placeholder"
                )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
