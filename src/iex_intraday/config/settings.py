"""Settings loaded from the environment.

Environment variables prefixed with ``IEX_`` override the defaults, e.g.
``IEX_CLOUD_SECRET=sk_...`` or ``IEX_RATE_LIMIT_INTERVAL=0.1``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://cloud.iexapis.com/stable"
MAX_BATCH_SYMBOLS = 100


class IEXSettings(BaseSettings):
    """Provider configuration for :class:`~iex_intraday.client.IEXClient`."""

    model_config = SettingsConfigDict(env_prefix="IEX_")

    cloud_secret: SecretStr | None = None
    base_url: str = DEFAULT_BASE_URL
    rate_limit_interval: float = Field(default=0.01, ge=0.0)
    request_timeout: float = Field(default=30.0, gt=0.0)
    batch_size: int = Field(default=MAX_BATCH_SYMBOLS, ge=1, le=MAX_BATCH_SYMBOLS)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> IEXSettings:
    return IEXSettings()
