"""Learned-precision cache implementations.

PrecisionResolver depends only on the PrecisionCache interface, so callers
can inject in-memory, file-backed, or networked storage. Keys are uppercase
exchange symbols, values are integer precisions.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from asterdex.exceptions import PrecisionCacheError
from asterdex.logging import get_logger

logger = get_logger(__name__)


class PrecisionCache(ABC):
    """Abstract symbol -> learned precision store."""

    @abstractmethod
    def get(self, symbol: str) -> int | None:
        """Return the learned precision for a symbol, or None if unknown."""
        ...

    @abstractmethod
    def set(self, symbol: str, precision: int) -> None:
        """Record a learned precision.

        Implementations must update the in-memory view before persisting, and
        raise PrecisionCacheError if persisting fails.
        """
        ...

    @abstractmethod
    def items(self) -> dict[str, int]:
        """Return a snapshot copy of all learned precisions."""
        ...


class InMemoryPrecisionCache(PrecisionCache):
    """Process-local cache with no persistence."""

    def __init__(self, initial: dict[str, int] | None = None) -> None:
        self._data: dict[str, int] = dict(initial or {})

    def get(self, symbol: str) -> int | None:
        return self._data.get(symbol)

    def set(self, symbol: str, precision: int) -> None:
        self._data[symbol] = precision

    def items(self) -> dict[str, int]:
        return dict(self._data)


class JsonFilePrecisionCache(InMemoryPrecisionCache):
    """Cache persisted as a flat JSON object (``{"BTCUSDT": 3}``).

    The file is read once at construction and rewritten in full on every
    set(). A missing or unreadable file starts the cache empty.

    Args:
        path: Location of the JSON file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        super().__init__(self._load())

    @property
    def path(self) -> Path:
        return self._path

    def set(self, symbol: str, precision: int) -> None:
        super().set(symbol, precision)
        self._save()

    def _load(self) -> dict[str, int]:
        if not self._path.exists():
            logger.debug("precision_cache_not_found", path=str(self._path))
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(
                "precision_cache_unreadable", path=str(self._path), error=str(exc)
            )
            return {}

        if not isinstance(raw, dict):
            logger.warning("precision_cache_malformed", path=str(self._path))
            return {}

        data: dict[str, int] = {}
        for symbol, precision in raw.items():
            # bool is an int subclass; reject it explicitly
            if isinstance(precision, int) and not isinstance(precision, bool):
                data[str(symbol).upper()] = precision
            else:
                logger.warning(
                    "precision_cache_entry_skipped", symbol=symbol, value=precision
                )

        logger.info("precision_cache_loaded", path=str(self._path), entries=len(data))
        return data

    def _save(self) -> None:
        payload = json.dumps(self._data, indent=2, sort_keys=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=self._path.name, suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PrecisionCacheError(
                f"Failed to save precision cache to {self._path}: {exc}"
            ) from exc

        logger.debug("precision_cache_saved", path=str(self._path), entries=len(self._data))
