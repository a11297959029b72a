"""
单序列拉取器

流程:
1. 懒加载密钥池
2. 校验参数 (密钥池非空 / Symbol 非空)，失败直接抛出配置错误
3. 内部 Symbol 转换为行情源格式
4. 每次尝试前轮换密钥 (主动轮换，均摊额度)
5. 请求并归类结果，临时故障换 Key 重试，数据完整性错误直接抛出
"""

from src.core.instruments import normalize_symbol, to_provider_symbol
from src.core.timeframes import Timeframe
from src.data.connectors.key_pool import KeyPool, mask_key
from src.data.connectors.twelvedata import TwelveDataConnector, parse_time_series
from src.data.errors import ConfigurationError, ProviderError
from src.data.fetcher.synthetic import SyntheticCandleGenerator
from src.data.models import Candle
from src.ops.logging import get_logger

logger = get_logger(__name__)


class SeriesFetcher:
    """
    单序列 K 线拉取器

    重试次数受 max_retries 约束，最多尝试 max_retries + 1 次
    """

    def __init__(
        self,
        pool: KeyPool,
        connector: TwelveDataConnector,
        generator: SyntheticCandleGenerator | None = None,
        max_retries: int = 3,
    ) -> None:
        """
        初始化拉取器

        Args:
            pool: 共享密钥池
            connector: 行情源连接器
            generator: 用于填充缺失成交量
            max_retries: 默认最大重试次数
        """
        self.pool = pool
        self.connector = connector
        self.generator = generator or SyntheticCandleGenerator()
        self.max_retries = max_retries

    async def fetch(
        self,
        symbol: str,
        interval: Timeframe | str,
        count: int,
        max_retries: int | None = None,
    ) -> list[Candle]:
        """
        拉取 K 线

        Args:
            symbol: 内部 Symbol，如 "EURUSD"
            interval: 时间框架
            count: K 线数量
            max_retries: 最大重试次数，默认使用实例配置

        Returns:
            按时间升序的 K 线列表

        Raises:
            ConfigurationError: 密钥池为空或 Symbol 为空
            ProviderError: 重试耗尽
            DataIntegrityError: 价格字段非数字
        """
        self.pool.ensure_loaded()

        if len(self.pool) == 0:
            raise ConfigurationError("No API keys available")
        if not symbol or not symbol.strip():
            raise ConfigurationError("Symbol parameter is required")

        retries_left = self.max_retries if max_retries is None else max_retries
        clean_symbol = normalize_symbol(symbol)
        provider_symbol = to_provider_symbol(clean_symbol)
        interval_str = (
            interval.to_twelvedata() if isinstance(interval, Timeframe) else interval
        )

        attempt = 0
        while True:
            attempt += 1
            api_key = self.pool.rotate()

            try:
                payload = await self.connector.fetch_time_series(
                    symbol=provider_symbol,
                    interval=interval_str,
                    outputsize=count,
                    api_key=api_key,
                )
                candles = parse_time_series(
                    payload,
                    provider_symbol,
                    interval_str,
                    self.generator.random_volume,
                )
            except ProviderError as e:
                can_retry = retries_left > 0 and len(self.pool) > 1
                logger.warning(
                    "series_fetch_failed",
                    symbol=provider_symbol,
                    interval=interval_str,
                    attempt=attempt,
                    key=mask_key(api_key),
                    kind=e.kind.value,
                    error=str(e),
                    will_retry=can_retry,
                )
                if not can_retry:
                    raise
                retries_left -= 1
                continue

            logger.info(
                "series_fetched",
                symbol=provider_symbol,
                interval=interval_str,
                candles=len(candles),
                attempt=attempt,
            )
            return candles


__all__ = ["SeriesFetcher"]
