"""
单序列拉取器测试

使用 httpx.MockTransport 模拟行情源
"""

import httpx
import pytest

from src.core.timeframes import Timeframe
from src.data.connectors.key_pool import KeyPool
from src.data.connectors.twelvedata import TwelveDataConnector
from src.data.errors import (
    ConfigurationError,
    DataIntegrityError,
    ProviderError,
    ProviderErrorKind,
)
from src.data.fetcher.series import SeriesFetcher
from src.data.fetcher.synthetic import SyntheticCandleGenerator


VALUES = [
    {"datetime": "2024-01-01 10:10:00", "open": "1.3", "high": "1.4", "low": "1.2", "close": "1.35"},
    {"datetime": "2024-01-01 10:05:00", "open": "1.2", "high": "1.3", "low": "1.1", "close": "1.3"},
    {"datetime": "2024-01-01 10:00:00", "open": "1.1", "high": "1.2", "low": "1.0", "close": "1.2"},
]


class FakeProvider:
    """按顺序返回预设响应并记录请求"""

    def __init__(self, *responses: httpx.Response | dict):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.responses)) - 1
        response = self.responses[index]
        if isinstance(response, dict):
            return httpx.Response(200, json=response)
        return response

    @property
    def keys_used(self) -> list[str]:
        return [r.url.params["apikey"] for r in self.requests]


def make_fetcher(provider: FakeProvider, *keys: str) -> SeriesFetcher:
    pool = KeyPool(default_key=keys[0] if keys else "")
    pool.load()
    for key in keys[1:]:
        pool.add(key)
    connector = TwelveDataConnector(transport=httpx.MockTransport(provider))
    return SeriesFetcher(pool, connector, SyntheticCandleGenerator(seed=1))


class TestSeriesFetcher:
    """SeriesFetcher 测试"""

    @pytest.mark.asyncio
    async def test_success_oldest_first(self):
        """测试返回按时间升序"""
        provider = FakeProvider({"values": VALUES})
        fetcher = make_fetcher(provider, "key-a", "key-b")

        candles = await fetcher.fetch("EURUSD", Timeframe.M5, 3)

        assert [c.datetime for c in candles] == [
            "2024-01-01 10:00:00",
            "2024-01-01 10:05:00",
            "2024-01-01 10:10:00",
        ]
        assert all(1000 <= c.volume < 11000 for c in candles)

    @pytest.mark.asyncio
    async def test_symbol_translated(self):
        """测试 EURUSD 转换为 EUR/USD"""
        provider = FakeProvider({"values": VALUES})
        fetcher = make_fetcher(provider, "key-a")

        await fetcher.fetch("eurusd", Timeframe.H1, 10)

        params = provider.requests[0].url.params
        assert params["symbol"] == "EUR/USD"
        assert params["interval"] == "1h"
        assert params["outputsize"] == "10"

    @pytest.mark.asyncio
    async def test_unknown_symbol_passthrough(self):
        """测试未知 Symbol 原样传递"""
        provider = FakeProvider({"values": VALUES})
        fetcher = make_fetcher(provider, "key-a")

        await fetcher.fetch("AAPL", "15min", 10)

        assert provider.requests[0].url.params["symbol"] == "AAPL"

    @pytest.mark.asyncio
    async def test_rotates_before_first_attempt(self):
        """测试首次请求前先轮换"""
        provider = FakeProvider({"values": VALUES})
        fetcher = make_fetcher(provider, "key-a", "key-b", "key-c")

        await fetcher.fetch("EURUSD", Timeframe.M5, 3)
        await fetcher.fetch("EURUSD", Timeframe.M5, 3)

        assert provider.keys_used == ["key-b", "key-c"]

    @pytest.mark.asyncio
    async def test_retry_budget(self):
        """测试持续失败时共尝试 max_retries + 1 次"""
        provider = FakeProvider(httpx.Response(500))
        fetcher = make_fetcher(provider, "key-a", "key-b")

        with pytest.raises(ProviderError) as exc_info:
            await fetcher.fetch("EURUSD", Timeframe.M5, 3, max_retries=3)

        assert len(provider.requests) == 4
        assert exc_info.value.kind == ProviderErrorKind.HTTP
        assert provider.keys_used == ["key-b", "key-a", "key-b", "key-a"]

    @pytest.mark.asyncio
    async def test_single_key_never_retries(self):
        """测试单个 Key 时不重试"""
        provider = FakeProvider({"status": "error", "code": 429, "message": "API credits"})
        fetcher = make_fetcher(provider, "key-a")

        with pytest.raises(ProviderError) as exc_info:
            await fetcher.fetch("EURUSD", Timeframe.M5, 3, max_retries=5)

        assert len(provider.requests) == 1
        assert exc_info.value.is_rate_limit

    @pytest.mark.asyncio
    async def test_recovers_on_next_key(self):
        """测试换 Key 后恢复"""
        provider = FakeProvider(
            {"status": "error", "code": 401, "message": "invalid api key"},
            {"values": []},
            {"values": VALUES},
        )
        fetcher = make_fetcher(provider, "key-a", "key-b", "key-c")

        candles = await fetcher.fetch("XAUUSD", Timeframe.H4, 3)

        assert len(candles) == 3
        assert len(provider.requests) == 3
        assert provider.keys_used == ["key-b", "key-c", "key-a"]

    @pytest.mark.asyncio
    async def test_zero_retries(self):
        """测试 max_retries=0 时只尝试一次"""
        provider = FakeProvider(httpx.Response(502))
        fetcher = make_fetcher(provider, "key-a", "key-b")

        with pytest.raises(ProviderError):
            await fetcher.fetch("EURUSD", Timeframe.M5, 3, max_retries=0)

        assert len(provider.requests) == 1

    @pytest.mark.asyncio
    async def test_data_integrity_not_retried(self):
        """测试数据完整性错误不重试"""
        bad = [{"datetime": "t1", "open": "x", "high": "1", "low": "1", "close": "1"}]
        provider = FakeProvider({"values": bad}, {"values": VALUES})
        fetcher = make_fetcher(provider, "key-a", "key-b")

        with pytest.raises(DataIntegrityError):
            await fetcher.fetch("EURUSD", Timeframe.M5, 3)

        assert len(provider.requests) == 1

    @pytest.mark.asyncio
    async def test_blank_symbol(self):
        """测试空 Symbol 直接抛出配置错误"""
        provider = FakeProvider({"values": VALUES})
        fetcher = make_fetcher(provider, "key-a")

        with pytest.raises(ConfigurationError):
            await fetcher.fetch("   ", Timeframe.M5, 3)

        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_empty_pool(self):
        """测试密钥池为空"""
        provider = FakeProvider({"values": VALUES})
        fetcher = make_fetcher(provider)

        with pytest.raises(ConfigurationError, match="No API keys"):
            await fetcher.fetch("EURUSD", Timeframe.M5, 3)

        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_lazy_loads_pool(self):
        """测试首次使用时加载密钥池"""
        provider = FakeProvider({"values": VALUES})
        pool = KeyPool(default_key="key-a")
        connector = TwelveDataConnector(transport=httpx.MockTransport(provider))
        fetcher = SeriesFetcher(pool, connector)

        await fetcher.fetch("EURUSD", Timeframe.M5, 3)

        assert pool.is_loaded
        assert provider.keys_used == ["key-a"]
