"""
配置文档存储

使用 SQLite 保存按名称索引的 JSON 配置文档 (例如 "marketData")
写入为合并语义: 只覆盖传入的字段，其余字段保留
"""

import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.ops.logging import get_logger

logger = get_logger(__name__)


class SettingsStore:
    """
    配置文档存储

    每个文档是一个 JSON 对象，以 name 为主键
    """

    def __init__(self, db_path: Path | str):
        """
        初始化存储

        Args:
            db_path: SQLite 文件路径
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        """初始化数据库表"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    name TEXT PRIMARY KEY,
                    document TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def read(self, name: str) -> dict[str, Any] | None:
        """
        读取配置文档

        Args:
            name: 文档名

        Returns:
            文档内容，不存在时返回 None
        """
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT document FROM settings WHERE name = ?", (name,)
            ).fetchone()

        if row is None:
            return None
        return json.loads(row[0])

    def write(self, name: str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        合并写入配置文档

        Args:
            name: 文档名
            fields: 需要更新的字段

        Returns:
            合并后的完整文档
        """
        now = datetime.now(UTC).isoformat()

        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT document FROM settings WHERE name = ?", (name,)
            ).fetchone()
            document = json.loads(row[0]) if row else {}
            document.update(fields)
            document["updatedAt"] = now

            conn.execute(
                """
                INSERT INTO settings (name, document, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    document = excluded.document,
                    updated_at = excluded.updated_at
                """,
                (name, json.dumps(document, ensure_ascii=False), now),
            )
            conn.commit()

        logger.debug("settings_written", name=name, fields=sorted(fields))
        return document

    def delete(self, name: str) -> bool:
        """删除配置文档"""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM settings WHERE name = ?", (name,))
            conn.commit()
            return cursor.rowcount > 0
