"""
API 密钥池

管理行情源的多个 API Key 并轮换使用:
- 从配置文档加载，始终包含内置兜底 Key
- 每次请求前轮换，均摊各 Key 的额度
- 至少保留一个 Key，拒绝重复添加

线程安全: 游标和列表的所有修改都在锁内完成
"""

import threading
from typing import Any, Protocol

from src.ops.logging import get_logger

logger = get_logger(__name__)


class SettingsBackend(Protocol):
    """配置文档读写接口"""

    def read(self, name: str) -> dict[str, Any] | None: ...

    def write(self, name: str, fields: dict[str, Any]) -> Any: ...


def mask_key(key: str) -> str:
    """
    掩码展示 Key

    Args:
        key: 原始 Key

    Returns:
        str: 前 4 位 + "..." + 后 4 位
    """
    return f"{key[:4]}...{key[-4:]}"


class KeyPool:
    """
    API 密钥池

    有序保存 Key (插入顺序) 与轮换游标，0 <= cursor < len
    """

    FIELD = "apiKeys"

    def __init__(
        self,
        default_key: str,
        store: SettingsBackend | None = None,
        settings_name: str = "marketData",
    ) -> None:
        """
        初始化密钥池

        Args:
            default_key: 内置兜底 Key
            store: 配置文档存储，None 时不持久化
            settings_name: 配置文档名
        """
        self._default_key = default_key
        self._store = store
        self._settings_name = settings_name

        self._keys: list[str] = []
        self._cursor = 0
        self._loaded = False
        self._lock = threading.RLock()

    # ============================================
    # 加载
    # ============================================

    def load(self) -> list[str]:
        """
        从配置文档加载密钥池

        - 文档为空: 只使用兜底 Key
        - 文档缺少兜底 Key: 插入到首位
        - 读取失败: 退回只含兜底 Key 的池

        Returns:
            加载后的 Key 列表
        """
        keys: list[str] = []
        try:
            document = self._store.read(self._settings_name) if self._store else None
            stored = (document or {}).get(self.FIELD) or []
            for key in stored:
                if isinstance(key, str) and key.strip() and key.strip() not in keys:
                    keys.append(key.strip())
        except Exception as e:
            logger.warning("key_pool_load_failed", error=str(e))
            keys = []

        if self._default_key and self._default_key not in keys:
            keys.insert(0, self._default_key)

        with self._lock:
            self._keys = keys
            self._cursor = 0
            self._loaded = True

        logger.info("key_pool_loaded", total_keys=len(keys))
        return list(keys)

    def ensure_loaded(self) -> None:
        """首次使用时加载"""
        if not self._loaded:
            self.load()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ============================================
    # 轮换
    # ============================================

    def current(self) -> str:
        """
        当前 Key

        池为空时返回兜底 Key，不修改状态
        """
        with self._lock:
            if not self._keys:
                return self._default_key
            return self._keys[self._cursor]

    def rotate(self) -> str:
        """
        游标前进一位 (取模回绕)

        池中不超过一个 Key 时不移动

        Returns:
            轮换后的当前 Key
        """
        with self._lock:
            if len(self._keys) <= 1:
                return self.current()
            self._cursor = (self._cursor + 1) % len(self._keys)
            key = self._keys[self._cursor]

        logger.debug("key_pool_rotated", cursor=self._cursor, key=mask_key(key))
        return key

    @property
    def cursor(self) -> int:
        return self._cursor

    def snapshot(self) -> tuple[str, ...]:
        """
        只读快照，从当前游标开始排列

        供健康检查使用，不影响生产轮换状态
        """
        with self._lock:
            return tuple(self._keys[self._cursor :] + self._keys[: self._cursor])

    @property
    def keys(self) -> list[str]:
        """按插入顺序返回所有 Key 的副本"""
        with self._lock:
            return list(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    # ============================================
    # 增删
    # ============================================

    def add(self, candidate: str) -> bool:
        """
        添加 Key 并持久化

        Args:
            candidate: 新 Key

        Returns:
            bool: 空白或重复时返回 False
        """
        key = (candidate or "").strip()
        if not key:
            return False

        self.ensure_loaded()
        with self._lock:
            if key in self._keys:
                logger.info("key_pool_duplicate_rejected", key=mask_key(key))
                return False
            self._keys.append(key)
            keys = list(self._keys)

            if not self._persist(keys):
                self._keys.remove(key)
                return False

        logger.info("key_pool_key_added", key=mask_key(key), total_keys=len(keys))
        return True

    def remove(self, candidate: str) -> bool:
        """
        移除 Key 并持久化

        最后一个 Key 永远不能被移除

        Args:
            candidate: 要移除的 Key

        Returns:
            bool: 是否移除
        """
        key = (candidate or "").strip()

        self.ensure_loaded()
        with self._lock:
            if len(self._keys) <= 1 or key not in self._keys:
                return False
            previous_keys, previous_cursor = list(self._keys), self._cursor
            self._keys.remove(key)
            if self._cursor >= len(self._keys):
                self._cursor = 0
            keys = list(self._keys)

            if not self._persist(keys):
                self._keys, self._cursor = previous_keys, previous_cursor
                return False

        logger.info("key_pool_key_removed", key=mask_key(key), total_keys=len(keys))
        return True

    def _persist(self, keys: list[str]) -> bool:
        """写回配置文档，失败时返回 False"""
        if self._store is None:
            return True
        try:
            self._store.write(self._settings_name, {self.FIELD: keys})
        except Exception as e:
            logger.error("key_pool_persist_failed", error=str(e))
            return False
        return True


__all__ = ["KeyPool", "SettingsBackend", "mask_key"]
