"""Order-precision retry ladder.

Wraps a single market-order submission. When the venue rejects the quantity
with PrecisionExceededError, the original quantity is re-floored one decimal
coarser and resubmitted, down to precision 0. The first precision that
succeeds is persisted through the PrecisionResolver, so the next order for
the same symbol starts there directly.

States: ATTEMPTING(p) -> SUCCEEDED | ATTEMPTING(p - 1) | EXHAUSTED.
Starting at p0 the ladder performs at most p0 + 1 submissions.
"""

import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Callable
from decimal import Decimal
from enum import Enum
from typing import Any

from asterdex.exceptions import (
    ConfigurationError,
    LadderExhaustedError,
    PrecisionExceededError,
)
from asterdex.logging import get_logger
from asterdex.models import (
    AttemptOutcome,
    LadderResult,
    OrderAttempt,
    OrderRequest,
    OrderSide,
)
from asterdex.precision.normalizer import (
    DecimalLike,
    floor_to_step,
    step_for_precision,
    to_decimal,
)
from asterdex.precision.registry import normalize_symbol
from asterdex.precision.resolver import PrecisionResolver

logger = get_logger(__name__)

SubmitFn = Callable[[OrderRequest], Awaitable[Any]]
MetadataFn = Callable[[], Awaitable[dict]]


class LadderState(str, Enum):
    """Retry ladder states."""

    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class PrecisionRetryEngine:
    """Submits orders, stepping precision down on precision rejections.

    Ladders for the same symbol are serialized on a per-symbol lock, so a
    queued ladder starts from whatever precision the previous one learned.
    Ladders for different symbols run concurrently.

    Args:
        resolver: Source of starting precision and sink for learned precision.
        metadata_fn: Optional async callable returning a live exchangeInfo
            snapshot. Used for a single best-effort detection pass per ladder.
        proactive_detection: Detect before the first attempt (only for symbols
            without a learned precision) instead of after the first rejection.
    """

    def __init__(
        self,
        resolver: PrecisionResolver,
        metadata_fn: MetadataFn | None = None,
        proactive_detection: bool = False,
    ) -> None:
        self._resolver = resolver
        self._metadata_fn = metadata_fn
        self._proactive_detection = proactive_detection
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def submit_with_precision_recovery(
        self,
        symbol: str,
        side: OrderSide | str,
        quantity: DecimalLike,
        reduce_only: bool,
        submit_fn: SubmitFn,
    ) -> Any:
        """Submit an order through the precision ladder and return the transport result.

        Raises:
            ConfigurationError: If the quantity is not positive, or floors to 0
                at the starting precision.
            LadderExhaustedError: If every precision down to 0 was rejected, or
                the next coarser rung would floor the quantity to 0.
            Exception: Any non-precision error from submit_fn, unchanged.
        """
        request = OrderRequest(
            symbol=normalize_symbol(symbol),
            side=OrderSide.coerce(side),
            quantity=to_decimal(quantity, "quantity"),
            reduce_only=reduce_only,
        )
        outcome = await self.run_ladder(request, submit_fn)
        return outcome.result

    async def run_ladder(self, request: OrderRequest, submit_fn: SubmitFn) -> LadderResult:
        """Run the full ladder for one order and return the successful outcome."""
        if request.quantity <= 0:
            raise ConfigurationError(f"quantity must be > 0, got {request.quantity}")

        symbol = normalize_symbol(request.symbol)
        async with self._locks[symbol]:
            return await self._run_locked(symbol, request, submit_fn)

    async def _run_locked(
        self, symbol: str, request: OrderRequest, submit_fn: SubmitFn
    ) -> LadderResult:
        start_precision = self._resolver.get_precision(symbol)
        detection_pending = self._metadata_fn is not None

        if detection_pending and self._proactive_detection:
            detection_pending = False
            if not self._resolver.has_learned(symbol):
                detected = await self._detect(symbol)
                if detected is not None:
                    start_precision = detected

        state = LadderState.ATTEMPTING
        precision = start_precision
        attempts: list[OrderAttempt] = []
        last_rejection: PrecisionExceededError | None = None

        while state is LadderState.ATTEMPTING:
            rounded = floor_to_step(request.quantity, step_for_precision(precision))
            if rounded <= 0:
                # coarser rungs only floor further, so nothing sendable remains
                state = LadderState.EXHAUSTED
                logger.error(
                    "precision_ladder_quantity_vanished",
                    symbol=symbol,
                    precision=precision,
                    requested=str(request.quantity),
                )
                if last_rejection is None:
                    raise ConfigurationError(
                        f"quantity {request.quantity} rounds to 0 at precision "
                        f"{precision} for {symbol}"
                    )
                raise LadderExhaustedError(
                    symbol, start_precision, last_rejection, attempts
                ) from last_rejection

            attempt_request = OrderRequest(
                symbol=symbol,
                side=request.side,
                quantity=rounded,
                reduce_only=request.reduce_only,
            )
            logger.debug(
                "precision_attempt",
                symbol=symbol,
                precision=precision,
                requested=str(request.quantity),
                rounded=str(rounded),
            )

            try:
                result = await submit_fn(attempt_request)
            except PrecisionExceededError as exc:
                last_rejection = exc
                attempts.append(
                    self._attempt(request, precision, rounded, AttemptOutcome.PRECISION_REJECTED)
                )
                logger.warning("precision_rejected", symbol=symbol, precision=precision)

                next_precision = precision - 1
                if detection_pending:
                    detection_pending = False
                    detected = await self._detect(symbol)
                    # only jump down; the ladder must stay strictly decreasing
                    if detected is not None and detected < precision:
                        next_precision = detected

                if next_precision < 0:
                    state = LadderState.EXHAUSTED
                    logger.error(
                        "precision_ladder_exhausted",
                        symbol=symbol,
                        start_precision=start_precision,
                        attempts=len(attempts),
                    )
                    raise LadderExhaustedError(
                        symbol, start_precision, exc, attempts
                    ) from exc

                precision = next_precision
                continue
            except Exception:
                attempts.append(
                    self._attempt(request, precision, rounded, AttemptOutcome.OTHER_ERROR)
                )
                logger.warning(
                    "order_submission_failed",
                    symbol=symbol,
                    precision=precision,
                    outcomes=[attempt.outcome.value for attempt in attempts],
                    exc_info=True,
                )
                raise

            state = LadderState.SUCCEEDED
            attempts.append(self._attempt(request, precision, rounded, AttemptOutcome.SUCCESS))

        self._resolver.set_precision(symbol, precision)
        logger.info(
            "precision_ladder_succeeded",
            symbol=symbol,
            precision=precision,
            start_precision=start_precision,
            attempts=len(attempts),
        )
        return LadderResult(result=result, precision=precision, attempts=attempts)

    async def _detect(self, symbol: str) -> int | None:
        """Best-effort live detection.

        Yields None on fetch failure or when the snapshot has no lot step for
        the symbol, so the ladder keeps its resolver-derived precision.
        """
        if self._metadata_fn is None:
            return None
        try:
            metadata = await self._metadata_fn()
            detected = self._resolver.try_detect_precision(metadata, symbol)
        except Exception as exc:
            logger.warning("precision_detection_failed", symbol=symbol, error=str(exc))
            return None

        if detected is None:
            logger.info("precision_not_in_metadata", symbol=symbol)
            return None

        logger.info("precision_detected", symbol=symbol, precision=detected)
        return detected

    @staticmethod
    def _attempt(
        request: OrderRequest, precision: int, rounded: Decimal, outcome: AttemptOutcome
    ) -> OrderAttempt:
        return OrderAttempt(
            symbol=normalize_symbol(request.symbol),
            requested_quantity=request.quantity,
            precision_tried=precision,
            rounded_quantity=rounded,
            outcome=outcome,
        )
