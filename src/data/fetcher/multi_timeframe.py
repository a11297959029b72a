"""
多时间框架拉取器

顺序拉取 5min / 15min / 1h / 4h:
- 请求间固定间隔，避免触发行情源每秒限频 (不并发)
- 单个时间框架失败时用模拟数据填充，记录失败原因
- 全部时间框架失败时抛出 AllTimeframesFailedError (结果已附带模拟数据)
"""

import asyncio

from src.core.instruments import normalize_symbol
from src.core.timeframes import MULTI_TIMEFRAMES, Timeframe
from src.data.errors import AllTimeframesFailedError, ConfigurationError, MarketDataError
from src.data.fetcher.series import SeriesFetcher
from src.data.fetcher.synthetic import SyntheticCandleGenerator, base_price_for
from src.data.models import MultiTimeframeResult
from src.ops.logging import get_logger

logger = get_logger(__name__)


class MultiTimeframeFetcher:
    """多时间框架拉取器"""

    def __init__(
        self,
        fetcher: SeriesFetcher,
        generator: SyntheticCandleGenerator | None = None,
        timeframes: list[Timeframe] | None = None,
        pacing_delay: float = 1.2,
        max_candles: int = 50,
    ) -> None:
        """
        初始化

        Args:
            fetcher: 单序列拉取器
            generator: 失败时的模拟数据来源
            timeframes: 拉取顺序
            pacing_delay: 请求间隔(秒)
            max_candles: 单次请求 K 线数量上限
        """
        self.fetcher = fetcher
        self.generator = generator or fetcher.generator
        self.timeframes = list(timeframes or MULTI_TIMEFRAMES)
        self.pacing_delay = pacing_delay
        self.max_candles = max_candles

    async def fetch_all(
        self, symbol: str, candle_count: int = 50
    ) -> MultiTimeframeResult:
        """
        拉取所有时间框架

        Args:
            symbol: 内部 Symbol
            candle_count: 每个时间框架的 K 线数量 (不超过 max_candles)

        Returns:
            MultiTimeframeResult，允许部分时间框架为模拟数据

        Raises:
            ConfigurationError: Symbol 为空
            AllTimeframesFailedError: 所有时间框架均失败
        """
        if not symbol or not symbol.strip():
            raise ConfigurationError("Symbol parameter is required")

        clean_symbol = normalize_symbol(symbol)
        count = min(candle_count, self.max_candles)
        result = MultiTimeframeResult(symbol=clean_symbol)

        logger.info(
            "multi_timeframe_fetch_start",
            symbol=clean_symbol,
            timeframes=[tf.value for tf in self.timeframes],
            count=count,
        )

        for i, tf in enumerate(self.timeframes):
            if i > 0:
                await asyncio.sleep(self.pacing_delay)

            try:
                result.timeframes[tf] = await self.fetcher.fetch(clean_symbol, tf, count)
            except MarketDataError as e:
                logger.warning(
                    "timeframe_fallback",
                    symbol=clean_symbol,
                    timeframe=tf.value,
                    error=str(e),
                )
                result.errors[tf] = str(e)
                result.synthetic.add(tf)
                result.timeframes[tf] = self.generator.generate(
                    count, base_price_for(clean_symbol)
                )

        if not result.real_timeframes:
            logger.warning("all_timeframes_failed", symbol=clean_symbol)
            result.is_demo = True
            raise AllTimeframesFailedError(clean_symbol, dict(result.errors), result)

        if result.errors:
            logger.warning(
                "multi_timeframe_partial",
                symbol=clean_symbol,
                failed=[tf.value for tf in result.errors],
            )

        logger.info(
            "multi_timeframe_fetch_complete",
            symbol=clean_symbol,
            real_data_timeframes=len(result.real_timeframes),
            fallback_timeframes=len(result.errors),
        )
        return result


__all__ = ["MultiTimeframeFetcher"]
