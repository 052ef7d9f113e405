"""Custom exceptions for the AsterDEX client.

All precision-layer and transport exceptions live here
to avoid circular imports between modules.
"""


class AsterdexError(Exception):
    """Base exception for all client errors."""


class ConfigurationError(AsterdexError):
    """Raised for missing credentials or malformed registry/normalizer input."""


class PrecisionCacheError(AsterdexError):
    """Raised when the learned-precision cache cannot be persisted."""


class VenueError(AsterdexError):
    """An error payload returned by the venue (``{"code": ..., "msg": ...}``)."""

    def __init__(self, code: int | None, msg: str) -> None:
        super().__init__(f"[{code}] {msg}" if code is not None else msg)
        self.code = code
        self.msg = msg


class PrecisionExceededError(VenueError):
    """Raised when the submitted quantity has more decimals than the symbol allows.

    The only retryable condition: drives the precision retry ladder.
    """


class OpaqueSubmissionError(VenueError):
    """Raised for any other venue rejection. Never retried."""


class LadderExhaustedError(AsterdexError):
    """Raised when every precision from the starting value down to 0 was rejected."""

    def __init__(
        self,
        symbol: str,
        start_precision: int,
        last_error: Exception,
        attempts: list | None = None,
    ) -> None:
        super().__init__(
            f"All precision values ({start_precision} to 0) failed for {symbol}"
        )
        self.symbol = symbol
        self.start_precision = start_precision
        self.last_error = last_error
        self.attempts = attempts or []
