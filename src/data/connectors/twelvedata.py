"""
Twelve Data 数据连接器

接口:
- /time_series: K 线数据 (返回按时间倒序)
- /api_usage: API Key 额度使用情况

响应形态:
- {"values": [...], "meta": {...}, "status": "ok"}
- {"price": "1.0850"} (单价格报价)
- {"status": "error", "code": 429, "message": "..."}

注意:
- 每个 Key 有每分钟/每日请求额度
- 所有请求都带超时
"""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import httpx

from src.data.errors import DataIntegrityError, ProviderError, ProviderErrorKind
from src.data.models import Candle
from src.ops.logging import get_logger

logger = get_logger(__name__)


# 额度耗尽时 message 中出现的关键字
RATE_LIMIT_MARKERS = ("api credits", "rate limit", "quota")


def classify_error(payload: dict[str, Any]) -> ProviderError | None:
    """
    识别错误负载

    Args:
        payload: 响应 JSON

    Returns:
        ProviderError，正常负载返回 None
    """
    code = payload.get("code")
    is_error = payload.get("status") == "error" or (
        isinstance(code, int) and code >= 400
    )
    if not is_error:
        return None

    message = str(payload.get("message") or "Unknown provider error")
    lowered = message.lower()

    if code == 429 or any(marker in lowered for marker in RATE_LIMIT_MARKERS):
        kind = ProviderErrorKind.RATE_LIMIT
    elif code == 401:
        kind = ProviderErrorKind.BAD_CREDENTIAL
    elif code == 400:
        kind = ProviderErrorKind.BAD_PARAMETERS
    else:
        kind = ProviderErrorKind.PROVIDER

    return ProviderError(
        f"Twelve Data error {code}: {message}",
        kind=kind,
        status_code=code if isinstance(code, int) else None,
    )


def _quote_time(payload: dict[str, Any]) -> str:
    """报价时间: datetime 字段，其次 Unix timestamp，缺失时取当前 UTC 时间"""
    if payload.get("datetime"):
        return str(payload["datetime"])
    timestamp = payload.get("timestamp")
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        return datetime.fromtimestamp(timestamp, UTC).isoformat()
    if timestamp:
        return str(timestamp)
    return datetime.now(UTC).isoformat()


def is_valid_probe(payload: Any) -> bool:
    """探测响应是否结构有效: 无错误码，且包含 values 或 price"""
    if not isinstance(payload, dict) or classify_error(payload) is not None:
        return False
    return bool(payload.get("values")) or payload.get("price") is not None


def parse_time_series(
    payload: Any,
    symbol: str,
    interval: str,
    volume_filler: Callable[[], float],
) -> list[Candle]:
    """
    解析 /time_series 响应

    Args:
        payload: 响应 JSON
        symbol: 行情源 Symbol (用于错误信息)
        interval: 时间框架 (用于错误信息)
        volume_filler: 缺失成交量时的填充函数

    Returns:
        按时间升序 (最旧在前) 的 K 线列表

    Raises:
        ProviderError: 错误负载 / 结构异常 / 空结果 (可重试)
        DataIntegrityError: 价格字段非数字 (不可重试)
    """
    if not isinstance(payload, dict):
        raise ProviderError(
            f"Unexpected response for {symbol} {interval}",
            kind=ProviderErrorKind.MALFORMED,
        )

    error = classify_error(payload)
    if error is not None:
        raise error

    values = payload.get("values")
    if values is None:
        # 单价格报价转为一根 K 线
        if payload.get("price") is not None:
            price = payload["price"]
            return [
                Candle.from_provider(
                    {
                        "datetime": _quote_time(payload),
                        "open": price,
                        "high": price,
                        "low": price,
                        "close": price,
                    },
                    volume_filler,
                )
            ]
        raise ProviderError(
            f"No candlestick data available for {symbol} on {interval} timeframe",
            kind=ProviderErrorKind.MALFORMED,
        )

    if not isinstance(values, list):
        raise ProviderError(
            f"Invalid data format for {symbol} on {interval} timeframe",
            kind=ProviderErrorKind.MALFORMED,
        )

    if not values:
        raise ProviderError(
            f"No historical data available for {symbol} on {interval} timeframe",
            kind=ProviderErrorKind.EMPTY,
        )

    candles: list[Candle] = []
    # 行情源按时间倒序返回
    for i, raw in enumerate(reversed(values)):
        if not isinstance(raw, Mapping):
            raise DataIntegrityError(f"Invalid candle data at index {i} for {symbol}")
        candles.append(Candle.from_provider(raw, volume_filler))
    return candles


class TwelveDataConnector:
    """
    Twelve Data HTTP 连接器

    只负责请求与 HTTP 层错误归类，不关心密钥轮换
    """

    BASE_URL = "https://api.twelvedata.com"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        初始化连接器

        Args:
            base_url: API 基础 URL
            timeout: 单次请求超时(秒)
            transport: 自定义传输层 (测试时注入 httpx.MockTransport)
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """获取或创建 HTTP 客户端"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """关闭连接"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "TwelveDataConnector":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        """
        发送 GET 请求

        Raises:
            ProviderError: 网络故障、超时、非 2xx 或非 JSON 响应
        """
        client = self._get_client()
        logger.debug("twelvedata_request", path=path, symbol=params.get("symbol"))

        try:
            response = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"Request to {path} timed out after {self.timeout}s",
                kind=ProviderErrorKind.HTTP,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Request to {path} failed: {e}", kind=ProviderErrorKind.HTTP
            ) from e

        if not response.is_success:
            raise ProviderError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                kind=ProviderErrorKind.HTTP,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"Invalid JSON from {path}", kind=ProviderErrorKind.MALFORMED
            ) from e

    async def fetch_time_series(
        self,
        symbol: str,
        interval: str,
        outputsize: int,
        api_key: str,
    ) -> Any:
        """
        拉取 K 线原始响应

        Args:
            symbol: 行情源 Symbol，如 "EUR/USD"
            interval: 如 "5min", "1h"
            outputsize: K 线数量
            api_key: API Key

        Returns:
            响应 JSON
        """
        params = {
            "symbol": symbol,
            "interval": interval,
            "outputsize": outputsize,
            "apikey": api_key,
            "format": "json",
        }
        return await self._get("/time_series", params)

    async def fetch_api_usage(self, api_key: str) -> Any:
        """
        拉取 API Key 额度使用情况

        Returns:
            行情源返回的原始对象
        """
        return await self._get("/api_usage", {"apikey": api_key})


__all__ = [
    "TwelveDataConnector",
    "classify_error",
    "is_valid_probe",
    "parse_time_series",
]
