"""
行情获取异常体系

分类:
- ConfigurationError: 配置错误 (密钥池为空 / Symbol 为空)，不重试
- ProviderError: 行情源临时故障 (HTTP/限频/密钥无效/参数错误/空结果)，轮换密钥后重试
- DataIntegrityError: 数据完整性错误 (价格字段非数字)，不重试
- AllTimeframesFailedError: 所有时间框架均退化为模拟数据，软失败
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.timeframes import Timeframe
    from src.data.models import MultiTimeframeResult


class MarketDataError(Exception):
    """行情获取异常基类"""


class ConfigurationError(MarketDataError):
    """配置错误"""


class ProviderErrorKind(str, Enum):
    """行情源错误子类型"""

    HTTP = "http"  # 网络故障 / 非 2xx
    BAD_PARAMETERS = "bad_parameters"  # code 400
    BAD_CREDENTIAL = "bad_credential"  # code 401
    RATE_LIMIT = "rate_limit"  # code 429 或额度耗尽
    PROVIDER = "provider"  # 其他错误负载
    MALFORMED = "malformed"  # 响应结构不符合预期
    EMPTY = "empty"  # 无数据


class ProviderError(MarketDataError):
    """
    行情源临时故障

    Attributes:
        kind: 错误子类型
        status_code: HTTP 状态码或错误负载中的 code
    """

    def __init__(
        self,
        message: str,
        kind: ProviderErrorKind = ProviderErrorKind.PROVIDER,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def is_rate_limit(self) -> bool:
        return self.kind == ProviderErrorKind.RATE_LIMIT

    @property
    def is_bad_credential(self) -> bool:
        return self.kind == ProviderErrorKind.BAD_CREDENTIAL


class DataIntegrityError(MarketDataError):
    """数据完整性错误"""


class AllTimeframesFailedError(MarketDataError):
    """
    所有时间框架均拉取失败

    result 中已填充模拟数据，调用方可降级为演示模式展示

    Attributes:
        symbol: 交易品种
        failures: 各时间框架的失败原因
        result: 完全由模拟数据构成的结果
    """

    def __init__(
        self,
        symbol: str,
        failures: "dict[Timeframe, str]",
        result: "MultiTimeframeResult",
    ) -> None:
        super().__init__(
            f"Failed to fetch any real data for {symbol}. "
            "Market data provider may be unavailable."
        )
        self.symbol = symbol
        self.failures = failures
        self.result = result


__all__ = [
    "MarketDataError",
    "ConfigurationError",
    "ProviderErrorKind",
    "ProviderError",
    "DataIntegrityError",
    "AllTimeframesFailedError",
]
