"""Abstract exchange client interface.

Defines the contract for the AsterDEX transport. Precision and sizing code
depends only on this interface, keeping ccxt details isolated in the
concrete implementation.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from asterdex.models import OrderSide


class ExchangeClient(ABC):
    """Abstract base class for futures exchange API clients."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the connection and cache exchange info."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (CRITICAL for ccxt async)."""
        ...

    @abstractmethod
    async def fetch_exchange_info(self) -> dict:
        """Fetch the raw exchangeInfo payload (symbols and their filters)."""
        ...

    @abstractmethod
    async def fetch_last_price(self, symbol: str) -> Decimal:
        """Fetch the last traded price for a symbol."""
        ...

    @abstractmethod
    async def fetch_available_balance(self, asset: str = "USDT") -> Decimal:
        """Fetch the available futures balance for an asset."""
        ...

    @abstractmethod
    async def fetch_position_amount(self, symbol: str) -> Decimal:
        """Fetch the signed position size (>0 long, <0 short, 0 flat)."""
        ...

    @abstractmethod
    async def set_leverage(self, symbol: str, leverage: int) -> dict:
        """Set initial leverage for a symbol."""
        ...

    @abstractmethod
    async def place_market_order(
        self,
        symbol: str,
        side: OrderSide,
        quantity: Decimal,
        reduce_only: bool = False,
    ) -> dict:
        """Submit a market order exactly as given, without any rounding.

        Raises:
            PrecisionExceededError: If the venue rejects the quantity's precision.
            OpaqueSubmissionError: For any other venue rejection.
        """
        ...
