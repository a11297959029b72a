"""
时间框架定义

多时间框架分析使用的时间框架:
- 5min, 15min: 分钟级
- 1h, 4h: 小时级

设计原则:
- 统一时区处理 (UTC)
- 支持行情源格式转换
"""

from datetime import timedelta
from enum import Enum


class Timeframe(str, Enum):
    """时间框架枚举"""

    M5 = "5min"  # 5分钟
    M15 = "15min"  # 15分钟
    H1 = "1h"  # 1小时
    H4 = "4h"  # 4小时

    @property
    def seconds(self) -> int:
        """返回时间框架对应的秒数"""
        _seconds_map = {
            "5min": 300,
            "15min": 900,
            "1h": 3600,
            "4h": 14400,
        }
        return _seconds_map[self.value]

    @property
    def minutes(self) -> int:
        """返回时间框架对应的分钟数"""
        return self.seconds // 60

    @property
    def timedelta(self) -> timedelta:
        """返回时间框架对应的 timedelta"""
        return timedelta(seconds=self.seconds)

    @classmethod
    def from_string(cls, value: str) -> "Timeframe":
        """
        从字符串解析时间框架

        同时接受 "5m" / "15m" 这类短写

        Args:
            value: 如 "15min", "1h"

        Returns:
            Timeframe 实例
        """
        value = value.lower().strip()
        aliases = {"5m": "5min", "15m": "15min"}
        value = aliases.get(value, value)
        for tf in cls:
            if tf.value == value:
                return tf
        raise ValueError(f"Unknown timeframe: {value}")

    def to_twelvedata(self) -> str:
        """
        转换为 Twelve Data interval 参数

        Returns:
            如 "5min", "1h"
        """
        return self.value


# 多时间框架拉取顺序 (由短到长)
MULTI_TIMEFRAMES = [Timeframe.M5, Timeframe.M15, Timeframe.H1, Timeframe.H4]


# 导出
__all__ = [
    "Timeframe",
    "MULTI_TIMEFRAMES",
]
