"""AsterDEX futures client implementation via ccxt async.

AsterDEX speaks the Binance USDT-M futures wire format, so the client wraps
ccxt.async_support.binanceusdm with the API URLs pointed at AsterDEX. ccxt
handles request signing (HMAC-SHA256, timestamp, recvWindow); orders go
through the raw implicit endpoints so the quantity reaches the venue exactly
as the precision layer rounded it.
"""

import asyncio
from decimal import Decimal

import ccxt.async_support as ccxt_async

from asterdex.config import ExchangeSettings, PrecisionSettings, SizingSettings
from asterdex.exceptions import ConfigurationError
from asterdex.exchange.client import ExchangeClient
from asterdex.exchange.errors import translate_error
from asterdex.logging import get_logger
from asterdex.models import OrderRequest, OrderSide, PositionPlan, RoundTripResult
from asterdex.precision.filters import extract_filters, find_symbol_info
from asterdex.precision.normalizer import qty_from_notional, to_decimal
from asterdex.precision.registry import normalize_symbol
from asterdex.precision.resolver import PrecisionResolver
from asterdex.precision.retry import PrecisionRetryEngine

logger = get_logger(__name__)


class AsterdexClient(ExchangeClient):
    """Concrete AsterDEX futures client using ccxt async.

    Args:
        settings: Credentials, base URL, recvWindow and timeout.
        resolver: Precision resolver shared with any other clients in the process.
        precision_settings: Live-detection behaviour of the retry ladder.
        sizing_settings: Defaults for calculate_max_position.

    Raises:
        ConfigurationError: If the API key or secret is empty.
    """

    def __init__(
        self,
        settings: ExchangeSettings,
        resolver: PrecisionResolver,
        precision_settings: PrecisionSettings | None = None,
        sizing_settings: SizingSettings | None = None,
    ) -> None:
        api_key = settings.api_key.get_secret_value().strip()
        api_secret = settings.api_secret.get_secret_value().strip()
        if not api_key:
            raise ConfigurationError("AsterdexClient: api_key is required")
        if not api_secret:
            raise ConfigurationError("AsterdexClient: api_secret is required")

        self._settings = settings
        self._resolver = resolver
        self._precision_settings = precision_settings or PrecisionSettings()
        self._sizing_settings = sizing_settings or SizingSettings()

        base_url = settings.base_url.rstrip("/")
        self._exchange = ccxt_async.binanceusdm(
            {
                "apiKey": api_key,
                "secret": api_secret,
                "enableRateLimit": True,
                "timeout": settings.timeout_ms,
                "options": {
                    "recvWindow": settings.recv_window,
                    "defaultType": "future",
                    "fetchCurrencies": False,
                },
                "urls": {
                    "api": {
                        "fapiPublic": f"{base_url}/fapi/v1",
                        "fapiPublicV2": f"{base_url}/fapi/v2",
                        "fapiPrivate": f"{base_url}/fapi/v1",
                        "fapiPrivateV2": f"{base_url}/fapi/v2",
                    },
                },
            }
        )

        self._retry_engine = PrecisionRetryEngine(
            resolver,
            metadata_fn=(
                self.fetch_exchange_info
                if self._precision_settings.live_detection
                else None
            ),
            proactive_detection=self._precision_settings.proactive_detection,
        )
        self._exchange_info: dict = {}

    @property
    def exchange(self) -> ccxt_async.binanceusdm:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    @property
    def resolver(self) -> PrecisionResolver:
        return self._resolver

    @property
    def retry_engine(self) -> PrecisionRetryEngine:
        return self._retry_engine

    async def connect(self) -> None:
        """Initialize connection by loading exchange info."""
        logger.info("connecting_to_asterdex", base_url=self._settings.base_url)
        self._exchange_info = await self.fetch_exchange_info()
        logger.info(
            "asterdex_connected",
            symbol_count=len(self._exchange_info.get("symbols") or []),
        )

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_asterdex_connection")
        await self._exchange.close()
        logger.info("asterdex_connection_closed")

    async def fetch_exchange_info(self) -> dict:
        """Fetch the raw exchangeInfo payload."""
        return await self._exchange.fapiPublicGetExchangeInfo()

    def get_exchange_info(self) -> dict:
        """Return the exchangeInfo snapshot cached at connect() time."""
        return self._exchange_info

    async def fetch_last_price(self, symbol: str) -> Decimal:
        response = await self._exchange.fapiPublicGetTickerPrice(
            {"symbol": normalize_symbol(symbol)}
        )
        return to_decimal(response["price"], "price")

    async def fetch_available_balance(self, asset: str = "USDT") -> Decimal:
        """Return availableBalance for an asset, or 0 if the asset is absent."""
        balances = await self._exchange.fapiPrivateV2GetBalance()
        for entry in balances:
            if entry.get("asset") == asset:
                return to_decimal(entry.get("availableBalance") or "0", "availableBalance")
        return Decimal("0")

    async def fetch_position_amount(self, symbol: str) -> Decimal:
        """Return positionAmt for a symbol, or 0 if the venue lists no position."""
        key = normalize_symbol(symbol)
        positions = await self._exchange.fapiPrivateV2GetPositionRisk({"symbol": key})
        for entry in positions:
            if entry.get("symbol") == key:
                return to_decimal(entry.get("positionAmt") or "0", "positionAmt")
        return Decimal("0")

    async def set_leverage(self, symbol: str, leverage: int) -> dict:
        logger.info("setting_leverage", symbol=symbol, leverage=leverage)
        return await self._exchange.fapiPrivatePostLeverage(
            {"symbol": normalize_symbol(symbol), "leverage": leverage}
        )

    async def place_market_order(
        self,
        symbol: str,
        side: OrderSide,
        quantity: Decimal,
        reduce_only: bool = False,
    ) -> dict:
        """Post a MARKET order with the quantity exactly as given.

        The response is returned with an added ``filledQty`` Decimal taken
        from executedQty, then cumQty, then origQty, then the request.

        Raises:
            PrecisionExceededError: On venue error -1111 (precision over maximum).
            OpaqueSubmissionError: On any other ccxt error.
        """
        quantity = to_decimal(quantity, "quantity")
        body = {
            "symbol": normalize_symbol(symbol),
            "side": OrderSide.coerce(side).value,
            "type": "MARKET",
            "positionSide": "BOTH",
            "quantity": format(quantity, "f"),
            "reduceOnly": "true" if reduce_only else "false",
            "newOrderRespType": "RESULT",
        }
        logger.info(
            "creating_order",
            symbol=body["symbol"],
            side=body["side"],
            quantity=body["quantity"],
            reduce_only=reduce_only,
        )

        try:
            response = await self._exchange.fapiPrivatePostOrder(body)
        except ccxt_async.BaseError as exc:
            raise translate_error(exc) from exc

        filled = next(
            (
                response.get(key)
                for key in ("executedQty", "cumQty", "origQty")
                if response.get(key) is not None
            ),
            quantity,
        )
        return {**response, "filledQty": to_decimal(filled, "filledQty")}

    async def place_market_order_smart(
        self,
        symbol: str,
        side: OrderSide,
        quantity: Decimal,
        reduce_only: bool = False,
    ) -> dict:
        """Place a market order through the precision retry ladder.

        Starts at the resolver's precision for the symbol, steps down on
        precision rejections, and persists the precision that succeeds.
        """

        async def submit(request: OrderRequest) -> dict:
            return await self.place_market_order(
                request.symbol, request.side, request.quantity, request.reduce_only
            )

        return await self._retry_engine.submit_with_precision_recovery(
            symbol, side, quantity, reduce_only, submit
        )

    async def sync_precisions(self, symbols: list[str] | None = None) -> dict[str, int]:
        """Learn precision for symbols from live exchangeInfo and persist it."""
        exchange_info = await self.fetch_exchange_info()
        return self._resolver.learn_from_metadata(exchange_info, symbols)

    async def calculate_max_position(
        self,
        symbol: str,
        leverage: int,
        safety_buffer: Decimal | None = None,
    ) -> PositionPlan:
        """Size the largest valid order from USDT balance, leverage and last price.

        target_notional = available_balance * leverage * safety_buffer, converted
        with qty_from_notional using the symbol's live step size and min notional.

        Raises:
            ConfigurationError: If the symbol is not listed in exchangeInfo.
        """
        exchange_info, balance, price = await asyncio.gather(
            self.fetch_exchange_info(),
            self.fetch_available_balance("USDT"),
            self.fetch_last_price(symbol),
        )

        symbol_info = find_symbol_info(exchange_info, symbol)
        if symbol_info is None:
            raise ConfigurationError(f"Symbol not found: {symbol}")

        filters = extract_filters(symbol_info)
        buffer = (
            safety_buffer
            if safety_buffer is not None
            else self._sizing_settings.safety_buffer
        )
        target_notional = balance * Decimal(leverage) * buffer
        quantity = qty_from_notional(
            target_notional, price, filters.step_size, filters.min_notional
        )

        plan = PositionPlan(
            symbol=normalize_symbol(symbol),
            balance=balance,
            price=price,
            leverage=leverage,
            target_notional=target_notional,
            quantity=quantity,
            effective_notional=quantity * price,
            step_size=filters.step_size,
            min_notional=filters.min_notional,
        )
        logger.debug(
            "position_calculated",
            symbol=plan.symbol,
            quantity=str(plan.quantity),
            effective_notional=str(plan.effective_notional),
        )
        return plan

    async def close_position(
        self,
        symbol: str,
        quantity: Decimal | None = None,
        side: OrderSide | str | None = None,
    ) -> dict:
        """Close a position with a reduce-only market order.

        Missing quantity or side is taken from the live position: the full
        size, on the side opposite its sign.

        Raises:
            ConfigurationError: If the position has to be looked up and is flat.
        """
        if quantity is None or side is None:
            amount = await self.fetch_position_amount(symbol)
            if amount == 0:
                raise ConfigurationError(f"No position to close for {normalize_symbol(symbol)}")
            if quantity is None:
                quantity = abs(amount)
            if side is None:
                side = OrderSide.SELL if amount > 0 else OrderSide.BUY

        logger.info(
            "closing_position",
            symbol=normalize_symbol(symbol),
            side=OrderSide.coerce(side).value,
            quantity=str(quantity),
        )
        return await self.place_market_order_smart(symbol, side, quantity, reduce_only=True)

    async def close_position_exact(
        self, symbol: str, quantity: Decimal, side: OrderSide | str
    ) -> dict:
        """Close exactly ``quantity`` (typically an opening fill) to avoid dust."""
        return await self.place_market_order_smart(symbol, side, quantity, reduce_only=True)

    async def execute_full_balance_trade(
        self,
        symbol: str,
        side: OrderSide | str,
        leverage: int,
        hold_seconds: float = 0.0,
        safety_buffer: Decimal | None = None,
    ) -> RoundTripResult:
        """Open the largest valid position, hold it, then close the exact fill.

        Sets leverage, sizes with calculate_max_position, opens through the
        precision ladder, waits ``hold_seconds`` and closes ``filledQty`` of
        the opening order on the opposite side.

        Raises:
            ConfigurationError: If the sized quantity is not positive or its
                notional is below the symbol's minimum.
        """
        side = OrderSide.coerce(side)
        await self.set_leverage(symbol, leverage)
        plan = await self.calculate_max_position(symbol, leverage, safety_buffer)

        if plan.quantity <= 0:
            raise ConfigurationError(f"Calculated quantity is <= 0 for {plan.symbol}")
        if plan.effective_notional < plan.min_notional:
            raise ConfigurationError(
                f"Effective notional ({plan.effective_notional}) is below "
                f"minNotional ({plan.min_notional}) for {plan.symbol}"
            )

        opened = await self.place_market_order_smart(symbol, side, plan.quantity)
        logger.info(
            "position_opened",
            symbol=plan.symbol,
            side=side.value,
            filled=str(opened["filledQty"]),
            hold_seconds=hold_seconds,
        )
        await asyncio.sleep(hold_seconds)

        closed = await self.close_position_exact(symbol, opened["filledQty"], side.opposite)
        remaining = await self.fetch_position_amount(symbol)
        if remaining != 0:
            logger.warning("position_dust_remaining", symbol=plan.symbol, remaining=str(remaining))

        return RoundTripResult(
            plan=plan, open=opened, close=closed, remaining_position=remaining
        )
