"""Optional memoization of engine results.

The engine is pure, so results can be reused whenever the same bar window is
computed with the same configuration. Keys are content fingerprints, not object
identities, so a rebuilt but equal bar list still hits.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, Sequence

from ta_engine.engine import compute_indicators
from ta_engine.exceptions import ConfigError
from ta_engine.types import IndicatorConfig

if TYPE_CHECKING:
    from ta_engine.types import Bar, IndicatorResult

logger = logging.getLogger(__name__)


def bars_fingerprint(bars: Sequence[Bar]) -> str:
    """SHA-256 over the OHLCV values of ``bars`` in order."""
    digest = hashlib.sha256()
    for bar in bars:
        row = (bar.timestamp, bar.open, bar.high, bar.low, bar.close, bar.volume)
        digest.update(repr(row).encode())
        digest.update(b"\n")
    return digest.hexdigest()


def config_fingerprint(config: IndicatorConfig) -> str:
    """SHA-256 over the canonical JSON form of ``config``."""
    data = config.model_dump(mode="json")
    data["indicators"] = sorted(data["indicators"])
    payload = json.dumps(data, sort_keys=True)
    return hashlib.sha256(payload.encode()).hexdigest()


class IndicatorCache:
    """LRU cache in front of :func:`ta_engine.engine.compute_indicators`.

    One instance may be shared between threads. Every call returns its own
    copy, so changing a returned result never alters the cached entry.

    :param maxsize: Maximum number of results kept.
    """

    def __init__(self, maxsize: int = 128) -> None:
        if maxsize <= 0:
            raise ConfigError(f"'maxsize' must be positive, got {maxsize}")
        self.maxsize = maxsize
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[tuple[str, str], IndicatorResult] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def compute(
        self, bars: Sequence[Bar], config: IndicatorConfig | None = None
    ) -> IndicatorResult:
        """Return the cached result for ``(bars, config)``, computing it on a miss."""
        config = config or IndicatorConfig()
        key = (bars_fingerprint(bars), config_fingerprint(config))

        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                return cached.model_copy(deep=True)
            self.misses += 1

        # Computed outside the lock; two threads missing on the same key both
        # compute and store identical results.
        result = compute_indicators(bars, config)

        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cached indicators for bars %s", evicted[0][:12])
        return result.model_copy(deep=True)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0
