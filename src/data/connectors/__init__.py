"""
数据源连接器

- TwelveDataConnector: Twelve Data HTTP 接口 (via httpx)
- KeyPool: API 密钥池与轮换
"""

from .key_pool import KeyPool, mask_key
from .twelvedata import (
    TwelveDataConnector,
    classify_error,
    is_valid_probe,
    parse_time_series,
)

__all__ = [
    "KeyPool",
    "mask_key",
    "TwelveDataConnector",
    "classify_error",
    "is_valid_probe",
    "parse_time_series",
]
