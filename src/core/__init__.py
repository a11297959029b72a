"""
Core 模块 - 基础组件

包含:
- config: 配置加载与环境区分
- instruments: 交易品种目录与 Symbol 映射
- timeframes: 时间框架定义
"""

from .instruments import (
    PROVIDER_SYMBOLS,
    TRADING_PAIRS,
    AssetCategory,
    TradingPair,
    find_pair,
    normalize_symbol,
    to_provider_symbol,
)
from .timeframes import MULTI_TIMEFRAMES, Timeframe

__all__ = [
    # Instruments
    "AssetCategory",
    "TradingPair",
    "TRADING_PAIRS",
    "PROVIDER_SYMBOLS",
    "normalize_symbol",
    "to_provider_symbol",
    "find_pair",
    # Timeframes
    "Timeframe",
    "MULTI_TIMEFRAMES",
]
