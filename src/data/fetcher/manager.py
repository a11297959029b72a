"""
行情数据服务 - 统一 Python API

把密钥池、连接器、拉取器、健康检查组装在一起:
- fetch_series(): 单时间框架
- fetch_all(): 多时间框架，全部失败时抛出 AllTimeframesFailedError
- fetch_all_or_demo(): 面向终端用户，失败时降级为演示数据
- test_connection() / key_status(): 管理后台使用
"""

from typing import Any

import httpx

from src.core.config import Settings, get_settings
from src.core.timeframes import Timeframe
from src.data.connectors.key_pool import KeyPool
from src.data.connectors.twelvedata import TwelveDataConnector
from src.data.errors import AllTimeframesFailedError, MarketDataError
from src.data.fetcher.multi_timeframe import MultiTimeframeFetcher
from src.data.fetcher.series import SeriesFetcher
from src.data.fetcher.synthetic import SyntheticCandleGenerator
from src.data.models import Candle, MultiTimeframeResult
from src.data.store.settings_store import SettingsStore
from src.ops.healthcheck import KeyHealthChecker, KeyStatusReport
from src.ops.logging import get_logger

logger = get_logger(__name__)


class MarketDataService:
    """
    行情数据服务

    一个进程内共享一个实例 (密钥池游标是共享状态)
    """

    def __init__(
        self,
        pool: KeyPool,
        connector: TwelveDataConnector,
        generator: SyntheticCandleGenerator | None = None,
        max_retries: int = 3,
        pacing_delay: float = 1.2,
        max_candles: int = 50,
        probe_symbol: str = "EUR/USD",
    ) -> None:
        self.pool = pool
        self.connector = connector
        self.generator = generator or SyntheticCandleGenerator()

        self.series = SeriesFetcher(
            pool, connector, self.generator, max_retries=max_retries
        )
        self.multi = MultiTimeframeFetcher(
            self.series,
            self.generator,
            pacing_delay=pacing_delay,
            max_candles=max_candles,
        )
        self.health = KeyHealthChecker(pool, connector, probe_symbol=probe_symbol)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "MarketDataService":
        """
        根据配置创建服务

        Args:
            settings: 配置，默认读取环境变量
            transport: 自定义 HTTP 传输层

        Returns:
            MarketDataService 实例
        """
        settings = settings or get_settings()
        td = settings.twelvedata

        store = SettingsStore(settings.settings_db)
        pool = KeyPool(
            default_key=td.default_api_key.get_secret_value(),
            store=store,
            settings_name=td.settings_name,
        )
        connector = TwelveDataConnector(
            base_url=td.base_url,
            timeout=td.request_timeout,
            transport=transport,
        )
        return cls(
            pool,
            connector,
            max_retries=td.max_retries,
            pacing_delay=td.pacing_delay,
            max_candles=td.max_candles,
            probe_symbol=td.probe_symbol,
        )

    async def close(self) -> None:
        """关闭 HTTP 连接"""
        await self.connector.close()

    async def __aenter__(self) -> "MarketDataService":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # ============================================
    # 初始化
    # ============================================

    async def initialize(self) -> bool:
        """
        加载密钥池并测试连通性

        Returns:
            bool: 行情源是否可用
        """
        self.pool.load()
        connected = await self.health.test_connection()
        logger.info(
            "market_data_initialized",
            total_keys=len(self.pool),
            connected=connected,
        )
        return connected

    # ============================================
    # 行情拉取
    # ============================================

    async def fetch_series(
        self,
        symbol: str,
        timeframe: Timeframe | str,
        count: int = 50,
        max_retries: int | None = None,
    ) -> list[Candle]:
        """拉取单个时间框架"""
        if isinstance(timeframe, str):
            timeframe = Timeframe.from_string(timeframe)
        return await self.series.fetch(symbol, timeframe, count, max_retries)

    async def fetch_all(
        self, symbol: str, candle_count: int = 50
    ) -> MultiTimeframeResult:
        """拉取所有时间框架"""
        return await self.multi.fetch_all(symbol, candle_count)

    async def fetch_all_or_demo(
        self, symbol: str, candle_count: int = 50
    ) -> MultiTimeframeResult:
        """
        拉取所有时间框架，失败时降级为演示数据

        - 全部时间框架失败: 返回异常中附带的模拟结果
        - 其他错误: 返回完整演示数据

        Returns:
            MultiTimeframeResult，is_demo 标记是否为演示数据
        """
        try:
            return await self.fetch_all(symbol, candle_count)
        except AllTimeframesFailedError as e:
            logger.warning("falling_back_to_demo_data", symbol=e.symbol)
            return e.result
        except MarketDataError as e:
            logger.warning("falling_back_to_demo_data", symbol=symbol, error=str(e))
            return self.demo(symbol, min(candle_count, self.multi.max_candles))

    def demo(self, symbol: str, count: int = 50) -> MultiTimeframeResult:
        """完整演示数据"""
        return self.generator.generate_multi_timeframe(symbol, count)

    # ============================================
    # 管理接口
    # ============================================

    async def test_connection(self) -> bool:
        return await self.health.test_connection()

    async def key_status(self) -> KeyStatusReport:
        return await self.health.key_status_report()

    def add_key(self, key: str) -> bool:
        return self.pool.add(key)

    def remove_key(self, key: str) -> bool:
        return self.pool.remove(key)


__all__ = ["MarketDataService"]
