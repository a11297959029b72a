"""
健康检查

职责:
- 行情源连通性检测 (任一 Key 可用即视为连通)
- 逐个 Key 的状态快照 (active / error / unknown) 与额度信息

探测只读取密钥池快照，不移动生产轮换游标
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

from src.data.connectors.key_pool import KeyPool, mask_key
from src.data.connectors.twelvedata import (
    TwelveDataConnector,
    classify_error,
    is_valid_probe,
)
from src.data.errors import ProviderError

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    """健康状态"""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


class KeyState(str, Enum):
    """单个 Key 状态"""

    ACTIVE = "active"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass
class HealthCheckResult:
    """健康检查结果"""

    name: str
    status: HealthStatus
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    latency_ms: float = 0.0
    checked_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class KeyStatus:
    """单个 Key 的健康记录 (key 为掩码后的展示值)"""

    key: str
    status: KeyState
    index: int = 0
    message: str = ""
    usage: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "status": self.status.value,
            "index": self.index,
            "message": self.message,
            "usage": self.usage,
        }


@dataclass
class KeyStatusReport:
    """密钥池状态报告"""

    keys: list[KeyStatus]
    active_key: int
    total_keys: int

    @property
    def active_count(self) -> int:
        return sum(1 for k in self.keys if k.status == KeyState.ACTIVE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "keys": [k.to_dict() for k in self.keys],
            "activeKey": self.active_key,
            "totalKeys": self.total_keys,
        }


class KeyHealthChecker:
    """
    密钥池健康检查器

    每次探测请求一根最近的 K 线 (流动性最好的品种)
    """

    def __init__(
        self,
        pool: KeyPool,
        connector: TwelveDataConnector,
        probe_symbol: str = "EUR/USD",
        probe_interval: str = "1min",
    ) -> None:
        self.pool = pool
        self.connector = connector
        self.probe_symbol = probe_symbol
        self.probe_interval = probe_interval

    async def _probe(self, api_key: str) -> Any:
        """发送一次最小探测请求，返回原始响应"""
        return await self.connector.fetch_time_series(
            symbol=self.probe_symbol,
            interval=self.probe_interval,
            outputsize=1,
            api_key=api_key,
        )

    async def test_connection(self) -> bool:
        """
        测试行情源连通性

        从当前 Key 开始依次探测，最多尝试池中 Key 数量次

        Returns:
            bool: 任一 Key 探测成功
        """
        self.pool.ensure_loaded()
        keys = self.pool.snapshot()

        if not keys:
            logger.warning("connection_test_no_keys")
            return False

        for attempt, api_key in enumerate(keys, start=1):
            try:
                payload = await self._probe(api_key)
            except ProviderError as e:
                logger.warning(
                    "connection_test_failed",
                    key=mask_key(api_key),
                    attempt=attempt,
                    error=str(e),
                )
                continue

            if is_valid_probe(payload):
                logger.info(
                    "connection_test_ok", key=mask_key(api_key), attempt=attempt
                )
                return True

            logger.warning(
                "connection_test_invalid_response",
                key=mask_key(api_key),
                attempt=attempt,
            )

        logger.error("connection_test_all_keys_failed", total_keys=len(keys))
        return False

    async def _check_key(self, index: int, api_key: str) -> KeyStatus:
        """探测单个 Key 并尝试附带额度信息"""
        masked = mask_key(api_key)

        try:
            payload = await self._probe(api_key)
        except ProviderError as e:
            status = KeyStatus(masked, KeyState.ERROR, index, str(e))
        else:
            error = classify_error(payload) if isinstance(payload, dict) else None
            if error is not None:
                status = KeyStatus(masked, KeyState.ERROR, index, str(error))
            elif is_valid_probe(payload):
                status = KeyStatus(masked, KeyState.ACTIVE, index)
            else:
                status = KeyStatus(
                    masked, KeyState.UNKNOWN, index, "Unexpected probe response"
                )

        # 额度信息尽力获取，失败忽略
        try:
            usage = await self.connector.fetch_api_usage(api_key)
            if isinstance(usage, dict) and classify_error(usage) is None:
                status.usage = usage
        except ProviderError as e:
            logger.debug("key_usage_unavailable", key=masked, error=str(e))

        return status

    async def key_status_snapshot(self) -> list[KeyStatus]:
        """
        逐个探测所有 Key

        按插入顺序返回，不修改轮换游标

        Returns:
            list[KeyStatus]
        """
        self.pool.ensure_loaded()

        statuses = []
        for index, api_key in enumerate(self.pool.keys):
            statuses.append(await self._check_key(index, api_key))

        logger.info(
            "key_status_snapshot",
            total_keys=len(statuses),
            active=sum(1 for s in statuses if s.status == KeyState.ACTIVE),
        )
        return statuses

    async def key_status_report(self) -> KeyStatusReport:
        """状态快照 + 当前游标"""
        keys = await self.key_status_snapshot()
        return KeyStatusReport(
            keys=keys,
            active_key=self.pool.cursor,
            total_keys=len(keys),
        )

    async def check(self) -> HealthCheckResult:
        """
        转换为通用健康检查结果

        - 全部 active: healthy
        - 部分 active: degraded
        - 无 active: unhealthy
        """
        start_time = datetime.now(UTC)
        report = await self.key_status_report()
        latency = (datetime.now(UTC) - start_time).total_seconds() * 1000

        if report.total_keys and report.active_count == report.total_keys:
            status = HealthStatus.HEALTHY
        elif report.active_count > 0:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.UNHEALTHY

        return HealthCheckResult(
            name="twelvedata",
            status=status,
            message=f"{report.active_count}/{report.total_keys} keys active",
            details=report.to_dict(),
            latency_ms=latency,
        )


__all__ = [
    "HealthStatus",
    "HealthCheckResult",
    "KeyState",
    "KeyStatus",
    "KeyStatusReport",
    "KeyHealthChecker",
]
