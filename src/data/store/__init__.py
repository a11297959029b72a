"""
数据存储模块

- SettingsStore: 配置文档存储 (密钥池等运行时可修改的配置)
"""

from src.data.store.settings_store import SettingsStore

__all__ = ["SettingsStore"]
