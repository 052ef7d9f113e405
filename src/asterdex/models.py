"""Shared data models for the AsterDEX client.

CRITICAL: All monetary values use Decimal. Never use float for prices, quantities, or fees.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from asterdex.exceptions import ConfigurationError


class OrderSide(str, Enum):
    """Order direction, in venue wire form."""

    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def coerce(cls, value: "OrderSide | str") -> "OrderSide":
        """Accept an OrderSide or a case-insensitive "buy"/"sell" string.

        Raises:
            ConfigurationError: For anything else.
        """
        if isinstance(value, cls):
            return value
        message = f"order side must be BUY or SELL, got {value!r}"
        if not isinstance(value, str):
            raise ConfigurationError(message)
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            raise ConfigurationError(message) from exc

    @property
    def opposite(self) -> "OrderSide":
        """The side that closes a position opened on this side."""
        return OrderSide.SELL if self is OrderSide.BUY else OrderSide.BUY


class AttemptOutcome(str, Enum):
    """Result of a single submission inside a precision retry ladder."""

    SUCCESS = "success"
    PRECISION_REJECTED = "precision_rejected"
    OTHER_ERROR = "other_error"


@dataclass
class OrderRequest:
    """Market order handed to a submit callable."""

    symbol: str
    side: OrderSide
    quantity: Decimal
    reduce_only: bool = False


@dataclass
class OrderAttempt:
    """One rung of a precision retry ladder. Never persisted."""

    symbol: str
    requested_quantity: Decimal
    precision_tried: int
    rounded_quantity: Decimal
    outcome: AttemptOutcome


@dataclass
class LadderResult:
    """Outcome of a successful precision retry ladder."""

    result: Any
    precision: int
    attempts: list[OrderAttempt] = field(default_factory=list)


@dataclass
class PositionPlan:
    """Quantity sizing derived from balance, leverage and last price."""

    symbol: str
    balance: Decimal
    price: Decimal
    leverage: int
    target_notional: Decimal
    quantity: Decimal
    effective_notional: Decimal
    step_size: Decimal
    min_notional: Decimal


@dataclass
class RoundTripResult:
    """Open and close legs of a full-balance trade."""

    plan: PositionPlan
    open: dict
    close: dict
    remaining_position: Decimal
