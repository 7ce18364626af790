from __future__ import annotations

import logging
import random
from typing import Mapping, Sequence

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from crypto_signals.config.models import DataConfig
from .provider_base import DataUnavailable, PriceSource

logger = logging.getLogger(__name__)


class MockPriceSource(PriceSource):
    """Synthesizes a drifting series that ends at a random current price."""

    def __init__(self, length: int = 100, seed: int | None = None) -> None:
        self._length = length
        self._seed = seed

    async def fetch(self, instrument: str, timeframe: str) -> Sequence[float]:
        rng = self._rng(instrument, timeframe)
        current_price = rng.random() * 10000
        prices: list[float] = []
        for i in reversed(range(self._length)):
            variation = (rng.random() - 0.5) * 0.1
            prices.append(current_price * (1 + variation * (i / self._length)))
        return tuple(prices)

    def _rng(self, instrument: str, timeframe: str) -> random.Random:
        if self._seed is None:
            return random.Random()
        return random.Random(f"{self._seed}:{instrument}:{timeframe}")


class StaticPriceSource(PriceSource):
    """Serves fixed series keyed by (instrument, timeframe)."""

    def __init__(self, series: Mapping[tuple[str, str], Sequence[float]]) -> None:
        self._series = {key: tuple(values) for key, values in series.items()}

    async def fetch(self, instrument: str, timeframe: str) -> Sequence[float]:
        try:
            return self._series[(instrument, timeframe)]
        except KeyError:
            raise DataUnavailable(instrument, timeframe, "no fixture series") from None


class BinancePriceSource(PriceSource):
    """Closing prices from the Binance klines REST endpoint."""

    def __init__(self, config: DataConfig, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url, timeout=config.timeout_seconds
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(max(self._config.retry_attempts, 1)),
            retry=retry_if_exception_type(httpx.HTTPError),
            reraise=True,
        )

    async def fetch(self, instrument: str, timeframe: str) -> Sequence[float]:
        params = {
            "symbol": f"{instrument.upper()}{self._config.quote_asset}",
            "interval": timeframe,
            "limit": self._config.history_limit,
        }
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._client.get("/api/v3/klines", params=params)
                    response.raise_for_status()
                    raw = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Kline request failed for %s %s: %s", instrument, timeframe, exc)
            raise DataUnavailable(instrument, timeframe, str(exc)) from exc
        except ValueError as exc:
            raise DataUnavailable(instrument, timeframe, "invalid JSON payload") from exc
        return self._parse_closes(instrument, timeframe, raw)

    @staticmethod
    def _parse_closes(instrument: str, timeframe: str, raw: object) -> tuple[float, ...]:
        if not isinstance(raw, list):
            raise DataUnavailable(instrument, timeframe, "unexpected kline payload")
        try:
            return tuple(float(row[4]) for row in raw)
        except (IndexError, TypeError, ValueError) as exc:
            raise DataUnavailable(instrument, timeframe, f"malformed kline row: {exc}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()


def build_price_source(config: DataConfig) -> PriceSource:
    if config.source == "binance":
        return BinancePriceSource(config)
    return MockPriceSource(length=config.history_limit, seed=config.seed)
