"""
数据获取器模块

提供带密钥轮换与降级的行情获取能力:
- 单序列拉取，失败换 Key 重试
- 多时间框架顺序拉取，单个失败用模拟数据填充
- 模拟数据生成 (演示模式)

主要组件:
- SeriesFetcher: 单序列拉取器
- MultiTimeframeFetcher: 多时间框架拉取器
- SyntheticCandleGenerator: 模拟 K 线生成器
- MarketDataService: 统一 Python API
"""

from .manager import MarketDataService
from .multi_timeframe import MultiTimeframeFetcher
from .series import SeriesFetcher
from .synthetic import SyntheticCandleGenerator, base_price_for

__all__ = [
    "SeriesFetcher",
    "MultiTimeframeFetcher",
    "SyntheticCandleGenerator",
    "base_price_for",
    "MarketDataService",
]
