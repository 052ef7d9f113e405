"""Quantity normalization against venue step-size semantics.

All calculations use Decimal arithmetic. Rounding is always DOWN to the step
so a normalized quantity never exceeds what the caller asked for, except
where the minimum-notional floor forces an increase.

Every component that needs a venue-valid quantity composes these functions
rather than re-implementing the rounding.
"""

from decimal import ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

from asterdex.exceptions import ConfigurationError

MIN_QUANTITY = Decimal("0.00000001")
DEFAULT_STEP_PRECISION = 3

DecimalLike = Decimal | str | int | float


def to_decimal(value: DecimalLike, name: str = "value") -> Decimal:
    """Convert a venue string or number to Decimal via str() to avoid float residue.

    Raises:
        ConfigurationError: If the value is not a finite number.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ConfigurationError(f"{name} is not a number: {value!r}") from exc
    if not result.is_finite():
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return result


def precision_from_step_size(step_size: DecimalLike) -> int:
    """Number of decimals implied by a step size: max(0, round(-log10(step))).

    A non-positive step returns DEFAULT_STEP_PRECISION.
    """
    step = to_decimal(step_size, "step_size")
    if step <= 0:
        return DEFAULT_STEP_PRECISION
    exponent = (-step.log10()).to_integral_value(rounding=ROUND_HALF_UP)
    return max(0, int(exponent))


def step_for_precision(precision: int) -> Decimal:
    """Return the step size for a precision, e.g. 3 -> Decimal("0.001")."""
    if precision < 0:
        raise ConfigurationError(f"precision must be >= 0, got {precision}")
    return Decimal(1).scaleb(-precision)


def floor_to_step(qty: DecimalLike, step_size: DecimalLike) -> Decimal:
    """Round a quantity down to the nearest multiple of step_size.

    The result is expressed with the step's derived precision when that
    representation is exact (e.g. 7 rather than 7.000 for step "1").
    A non-positive step disables rounding and returns qty unchanged.

    Args:
        qty: Raw quantity.
        step_size: Smallest quantity increment (e.g. "0.001").

    Returns:
        Largest multiple of step_size that is <= qty.
    """
    quantity = to_decimal(qty, "qty")
    step = to_decimal(step_size, "step_size")
    if step <= 0:
        return quantity

    stepped = (quantity / step).to_integral_value(rounding=ROUND_FLOOR) * step
    scale = step_for_precision(precision_from_step_size(step))
    normalized = stepped.quantize(scale, rounding=ROUND_DOWN)
    return normalized if normalized == stepped else stepped


def ensure_min_notional(
    qty: DecimalLike,
    price: DecimalLike,
    min_notional: DecimalLike,
    step_size: DecimalLike,
) -> Decimal:
    """Raise a quantity to the venue's minimum notional when it falls short.

    If qty * price already meets min_notional (an exact tie counts as
    meeting it), or min_notional is not positive, qty is returned unchanged.
    Otherwise returns floor_to_step(min_notional / price, step_size).
    """
    quantity = to_decimal(qty, "qty")
    px = to_decimal(price, "price")
    floor_notional = to_decimal(min_notional or "0", "min_notional")

    if floor_notional <= 0:
        return quantity
    if quantity * px >= floor_notional:
        return quantity
    if px <= 0:
        return quantity

    return floor_to_step(floor_notional / px, step_size)


def qty_from_notional(
    notional: DecimalLike,
    price: DecimalLike,
    step_size: DecimalLike,
    min_notional: DecimalLike = "0",
) -> Decimal:
    """Convert a target notional (quote currency) into a venue-valid quantity.

    Steps:
    1. raw = notional / price (0 if price <= 0)
    2. raw = ensure_min_notional(raw, price, min_notional, step_size)
    3. qty = floor_to_step(raw, step_size)
    4. clamp to MIN_QUANTITY so rounding never yields zero or less
    """
    px = to_decimal(price, "price")
    if px <= 0:
        return Decimal("0")

    raw = to_decimal(notional, "notional") / px
    raw = ensure_min_notional(raw, px, min_notional, step_size)
    return max(MIN_QUANTITY, floor_to_step(raw, step_size))
