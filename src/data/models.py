"""
行情数据模型

- Candle: 单根 OHLCV K 线
- MultiTimeframeResult: 多时间框架聚合结果
"""

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from src.core.timeframes import MULTI_TIMEFRAMES, Timeframe
from src.data.errors import DataIntegrityError

PRICE_FIELDS = ("open", "high", "low", "close")


def _to_float(value: Any) -> float:
    """解析价格字段，非有限数字抛 ValueError"""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a number: {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


@dataclass
class Candle:
    """
    K 线

    只校验四个价格均为有限数字，不校验 open/close 是否落在 [low, high] 内
    """

    datetime: str
    open: float
    high: float
    low: float
    close: float
    volume: float

    @classmethod
    def from_provider(
        cls,
        raw: Mapping[str, Any],
        volume_filler: Callable[[], float],
    ) -> "Candle":
        """
        从行情源返回的字典解析

        Args:
            raw: 如 {"datetime": "...", "open": "1.1", ...}，数值可为字符串
            volume_filler: 缺失成交量时的填充函数

        Returns:
            Candle 实例

        Raises:
            DataIntegrityError: 价格字段缺失或非数字
        """
        try:
            prices = {name: _to_float(raw.get(name)) for name in PRICE_FIELDS}
        except (TypeError, ValueError) as e:
            raise DataIntegrityError(f"Invalid price data: {e}") from e

        try:
            parsed_volume: float | None = _to_float(raw.get("volume"))
        except (TypeError, ValueError):
            parsed_volume = None
        # 外汇品种不返回成交量
        if not parsed_volume:
            parsed_volume = float(volume_filler())

        return cls(
            datetime=str(raw.get("datetime") or raw.get("time") or ""),
            volume=parsed_volume,
            **prices,
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "datetime": self.datetime,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass
class MultiTimeframeResult:
    """
    多时间框架结果

    timeframes 按拉取顺序插入，每个序列按时间升序 (最旧在前)
    """

    symbol: str
    timeframes: dict[Timeframe, list[Candle]] = field(default_factory=dict)
    errors: dict[Timeframe, str] = field(default_factory=dict)
    synthetic: set[Timeframe] = field(default_factory=set)
    is_demo: bool = False

    @property
    def real_timeframes(self) -> list[Timeframe]:
        """返回了真实数据且未记录失败的时间框架"""
        return [
            tf
            for tf, candles in self.timeframes.items()
            if candles and tf not in self.errors and tf not in self.synthetic
        ]

    @property
    def synthetic_timeframes(self) -> list[Timeframe]:
        """使用模拟数据填充的时间框架"""
        return [tf for tf in self.timeframes if tf in self.synthetic]

    def candles(self, timeframe: Timeframe | str) -> list[Candle]:
        """获取指定时间框架的 K 线"""
        if isinstance(timeframe, str):
            timeframe = Timeframe.from_string(timeframe)
        return self.timeframes.get(timeframe, [])

    def to_frame(self, timeframe: Timeframe | str) -> pd.DataFrame:
        """
        转换为 DataFrame

        Returns:
            DataFrame with columns: timestamp, open, high, low, close, volume
        """
        candles = self.candles(timeframe)
        if not candles:
            return pd.DataFrame(
                columns=["timestamp", "open", "high", "low", "close", "volume"]
            )

        df = pd.DataFrame([c.to_dict() for c in candles])
        df = df.rename(columns={"datetime": "timestamp"})
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
        return df[["timestamp", "open", "high", "low", "close", "volume"]]

    def to_dict(self) -> dict[str, Any]:
        """转换为字典 (timeframe 以字符串为键)"""
        ordered = [tf for tf in MULTI_TIMEFRAMES if tf in self.timeframes]
        ordered += [tf for tf in self.timeframes if tf not in ordered]
        return {
            "symbol": self.symbol,
            "timeframes": {
                tf.value: [c.to_dict() for c in self.timeframes[tf]] for tf in ordered
            },
            "errors": {tf.value: msg for tf, msg in self.errors.items()},
            "synthetic": [tf.value for tf in self.synthetic_timeframes],
            "is_demo": self.is_demo,
        }


__all__ = [
    "Candle",
    "MultiTimeframeResult",
    "PRICE_FIELDS",
]
