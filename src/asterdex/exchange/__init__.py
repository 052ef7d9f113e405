"""Exchange client layer -- AsterDEX futures API via ccxt."""

from asterdex.exchange.asterdex_client import AsterdexClient
from asterdex.exchange.client import ExchangeClient
from asterdex.exchange.errors import translate_error

__all__ = ["AsterdexClient", "ExchangeClient", "translate_error"]
