"""
模拟 K 线生成器

真实数据不可用时的降级数据源 (演示模式):
- 有界随机游走，开盘价等于上一根收盘价
- 5 分钟等间隔时间戳，截止到当前时间
- 价格 <= 100 保留 4 位小数 (外汇)，否则 2 位 (指数/商品)
"""

from datetime import UTC, datetime, timedelta

import numpy as np

from src.core.instruments import normalize_symbol
from src.core.timeframes import MULTI_TIMEFRAMES
from src.data.models import Candle, MultiTimeframeResult
from src.ops.logging import get_logger

logger = get_logger(__name__)


# Symbol 子串 -> 参考价格，按顺序匹配
BASE_PRICES: tuple[tuple[tuple[str, ...], float], ...] = (
    (("XAU",), 2000.0),  # 黄金
    (("BTC",), 45000.0),
    (("ETH",), 3000.0),
    (("EUR", "GBP", "AUD"), 1.1),  # 主要外汇
    (("JPY",), 150.0),
    (("SPX",), 4500.0),
    (("NDX",), 15000.0),
    (("DJI",), 35000.0),
)

DEFAULT_BASE_PRICE = 100.0

# 成交量范围 [low, high)
VOLUME_RANGE = (1000, 11000)

CANDLE_SPACING = timedelta(minutes=5)


def base_price_for(symbol: str) -> float:
    """
    获取 Symbol 的参考价格

    Args:
        symbol: 如 "XAUUSD"

    Returns:
        float: 未知品种返回 100
    """
    key = normalize_symbol(symbol)
    for markers, price in BASE_PRICES:
        if any(marker in key for marker in markers):
            return price
    return DEFAULT_BASE_PRICE


class SyntheticCandleGenerator:
    """
    模拟 K 线生成器

    无状态 (除随机数发生器外)，可传入 seed 复现结果
    """

    def __init__(self, seed: int | np.random.Generator | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def random_volume(self) -> float:
        """随机成交量，用于填充行情源缺失的 volume"""
        return float(self._rng.integers(*VOLUME_RANGE))

    def generate(
        self,
        count: int,
        base_price: float = DEFAULT_BASE_PRICE,
        end: datetime | None = None,
    ) -> list[Candle]:
        """
        生成模拟 K 线

        Args:
            count: 数量
            base_price: 参考价格
            end: 截止时间，默认当前 UTC 时间

        Returns:
            按时间升序的 K 线列表
        """
        end = end or datetime.now(UTC)
        decimals = 4 if base_price <= 100 else 2

        candles: list[Candle] = []
        current = base_price

        for i in range(count):
            change = self._rng.uniform(-1.0, 1.0) * base_price * 0.02
            open_ = current
            close = current + change
            high = max(open_, close) + self._rng.uniform(0.0, 0.01) * base_price
            low = min(open_, close) - self._rng.uniform(0.0, 0.01) * base_price

            candles.append(
                Candle(
                    datetime=(end - (count - i) * CANDLE_SPACING).isoformat(),
                    open=round(open_, decimals),
                    high=round(high, decimals),
                    low=round(low, decimals),
                    close=round(close, decimals),
                    volume=self.random_volume(),
                )
            )
            current = close

        return candles

    def generate_multi_timeframe(
        self, symbol: str, count: int = 50
    ) -> MultiTimeframeResult:
        """
        生成完整的演示数据 (所有时间框架)

        Args:
            symbol: 交易品种
            count: 每个时间框架的 K 线数量

        Returns:
            MultiTimeframeResult (is_demo=True)
        """
        clean_symbol = normalize_symbol(symbol)
        base_price = base_price_for(clean_symbol)

        logger.info("demo_data_generated", symbol=clean_symbol, base_price=base_price)

        return MultiTimeframeResult(
            symbol=clean_symbol,
            timeframes={tf: self.generate(count, base_price) for tf in MULTI_TIMEFRAMES},
            synthetic=set(MULTI_TIMEFRAMES),
            is_demo=True,
        )


__all__ = [
    "SyntheticCandleGenerator",
    "base_price_for",
    "BASE_PRICES",
    "DEFAULT_BASE_PRICE",
]
