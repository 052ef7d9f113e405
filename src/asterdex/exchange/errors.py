"""Translation of ccxt exceptions into the client's error taxonomy.

ccxt embeds the raw venue body in the exception message, e.g.
``binanceusdm {"code":-1111,"msg":"Precision is over the maximum defined for this asset."}``.
"""

import json
import re

from asterdex.exceptions import OpaqueSubmissionError, PrecisionExceededError, VenueError

PRECISION_ERROR_CODE = -1111
PRECISION_ERROR_MESSAGE = "Precision is over the maximum"

_BODY_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


def parse_venue_error(exc: BaseException) -> tuple[int | None, str]:
    """Extract (code, msg) from an exception message, if it carries a venue body."""
    text = str(exc)
    match = _BODY_PATTERN.search(text)
    if match:
        try:
            body = json.loads(match.group(0))
        except ValueError:
            body = None
        if isinstance(body, dict) and "code" in body:
            try:
                code = int(body["code"])
            except (TypeError, ValueError):
                code = None
            return code, str(body.get("msg", ""))
    return None, text


def is_precision_exceeded(code: int | None, msg: str) -> bool:
    return code == PRECISION_ERROR_CODE and PRECISION_ERROR_MESSAGE in msg


def translate_error(exc: BaseException) -> VenueError:
    """Map a transport exception to PrecisionExceededError or OpaqueSubmissionError."""
    code, msg = parse_venue_error(exc)
    if is_precision_exceeded(code, msg):
        return PrecisionExceededError(code, msg)
    return OpaqueSubmissionError(code, msg)
