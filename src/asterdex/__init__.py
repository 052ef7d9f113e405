"""AsterDEX futures API client with automatic quantity precision recovery."""

from asterdex.config import AppSettings
from asterdex.exceptions import (
    AsterdexError,
    ConfigurationError,
    LadderExhaustedError,
    OpaqueSubmissionError,
    PrecisionExceededError,
)
from asterdex.exchange import AsterdexClient
from asterdex.logging import setup_logging
from asterdex.models import OrderRequest, OrderSide, RoundTripResult
from asterdex.precision import (
    InMemoryPrecisionCache,
    JsonFilePrecisionCache,
    PrecisionResolver,
    PrecisionRetryEngine,
    ensure_min_notional,
    floor_to_step,
    qty_from_notional,
)


def build_client(settings: AppSettings | None = None) -> AsterdexClient:
    """Configure logging and wire a client with a file-backed precision cache."""
    settings = settings or AppSettings()
    setup_logging(settings.log_level)
    resolver = PrecisionResolver(JsonFilePrecisionCache(settings.precision.cache_path))
    return AsterdexClient(
        settings.exchange,
        resolver,
        precision_settings=settings.precision,
        sizing_settings=settings.sizing,
    )


__all__ = [
    "AppSettings",
    "AsterdexClient",
    "AsterdexError",
    "ConfigurationError",
    "InMemoryPrecisionCache",
    "JsonFilePrecisionCache",
    "LadderExhaustedError",
    "OpaqueSubmissionError",
    "OrderRequest",
    "OrderSide",
    "PrecisionExceededError",
    "PrecisionResolver",
    "PrecisionRetryEngine",
    "RoundTripResult",
    "build_client",
    "ensure_min_notional",
    "floor_to_step",
    "qty_from_notional",
    "setup_logging",
]
