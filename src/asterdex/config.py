"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExchangeSettings(BaseSettings):
    """AsterDEX futures API connection settings."""

    model_config = SettingsConfigDict(env_prefix="ASTERDEX_")

    api_key: SecretStr = SecretStr("")
    api_secret: SecretStr = SecretStr("")
    base_url: str = "https://fapi.asterdex.com"
    recv_window: int = 5000  # ms
    timeout_ms: int = 20000


class PrecisionSettings(BaseSettings):
    """Quantity precision resolution and learned-precision cache settings.

    All fields configurable via PRECISION_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="PRECISION_")

    cache_path: str = ".precision-cache.json"
    live_detection: bool = True  # consult exchangeInfo during a retry ladder
    proactive_detection: bool = False  # detect before the first attempt


class SizingSettings(BaseSettings):
    """Position sizing defaults for notional-based order quantities."""

    model_config = SettingsConfigDict(env_prefix="SIZING_")

    safety_buffer: Decimal = Decimal("0.98")  # fraction of balance * leverage


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    exchange: ExchangeSettings = ExchangeSettings()
    precision: PrecisionSettings = PrecisionSettings()
    sizing: SizingSettings = SizingSettings()
