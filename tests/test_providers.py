import asyncio

import httpx
import pytest

from crypto_signals.config.models import DataConfig
from crypto_signals.data.provider_base import DataUnavailable
from crypto_signals.data.providers import (
    BinancePriceSource,
    MockPriceSource,
    StaticPriceSource,
    build_price_source,
)


def test_mock_source_seeded_is_reproducible():
    first = asyncio.run(MockPriceSource(seed=42).fetch("BTC", "1d"))
    second = asyncio.run(MockPriceSource(seed=42).fetch("BTC", "1d"))
    other = asyncio.run(MockPriceSource(seed=42).fetch("BTC", "4h"))
    assert first == second
    assert first != other
    assert len(first) == 100
    assert all(price >= 0 for price in first)


def test_static_source():
    source = StaticPriceSource({("BTC", "1d"): [1.0, 2.0]})
    assert asyncio.run(source.fetch("BTC", "1d")) == (1.0, 2.0)
    with pytest.raises(DataUnavailable) as excinfo:
        asyncio.run(source.fetch("ETH", "1d"))
    assert excinfo.value.instrument == "ETH"


def _binance(handler, **overrides):
    config = DataConfig(source="binance", retry_attempts=1, **overrides)
    client = httpx.AsyncClient(base_url=config.base_url, transport=httpx.MockTransport(handler))
    return BinancePriceSource(config, client=client)


def _fetch(source, instrument="BTC", timeframe="4h"):
    async def _run():
        try:
            return await source.fetch(instrument, timeframe)
        finally:
            await source.aclose()

    return asyncio.run(_run())


def test_binance_parses_closing_prices():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        seen["path"] = request.url.path
        rows = [[0, "1", "2", "0.5", "1.5", "10"], [1, "1.5", "3", "1", "2.5", "12"]]
        return httpx.Response(200, json=rows)

    closes = _fetch(_binance(handler))
    assert closes == (1.5, 2.5)
    assert seen["path"] == "/api/v3/klines"
    assert seen["symbol"] == "BTCUSDT"
    assert seen["interval"] == "4h"
    assert seen["limit"] == "100"


def test_binance_http_error_becomes_data_unavailable():
    source = _binance(lambda request: httpx.Response(500, json={"msg": "boom"}))
    with pytest.raises(DataUnavailable):
        _fetch(source)


def test_binance_unexpected_payload_becomes_data_unavailable():
    source = _binance(lambda request: httpx.Response(200, json={"code": -1121}))
    with pytest.raises(DataUnavailable) as excinfo:
        _fetch(source)
    assert "unexpected" in excinfo.value.reason


def test_build_price_source():
    assert isinstance(build_price_source(DataConfig()), MockPriceSource)
    source = build_price_source(DataConfig(source="binance"))
    assert isinstance(source, BinancePriceSource)
    asyncio.run(source.aclose())
