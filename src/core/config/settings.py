"""
配置设置定义

使用 Pydantic Settings 实现类型安全的配置
"""

from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """运行环境"""

    DEV = "dev"
    PROD = "prod"


class TwelveDataSettings(BaseSettings):
    """Twelve Data 行情源配置"""

    model_config = SettingsConfigDict(
        env_prefix="TWELVEDATA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_api_key: SecretStr = Field(
        default=SecretStr(""), description="内置兜底 API Key (密钥池为空时使用)"
    )
    base_url: str = Field(
        default="https://api.twelvedata.com", description="API 基础 URL"
    )
    request_timeout: float = Field(default=10.0, description="单次 HTTP 请求超时(秒)")

    # 拉取策略
    max_retries: int = Field(default=3, description="单序列拉取最大重试次数")
    pacing_delay: float = Field(
        default=1.2, description="多时间框架请求之间的间隔秒数 (规避每秒限频)"
    )
    max_candles: int = Field(default=50, description="单次请求 K 线数量上限")

    # 健康检查
    probe_symbol: str = Field(default="EUR/USD", description="探测用交易对")

    # 持久化
    settings_name: str = Field(default="marketData", description="密钥池配置文档名")


class Settings(BaseSettings):
    """主配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 环境
    env: Environment = Field(default=Environment.DEV, description="运行环境")

    # 数据目录
    data_dir: Path = Field(default=Path("./data"), description="数据根目录")
    log_dir: Path = Field(default=Path("./logs"), description="日志目录")
    settings_db: Path = Field(
        default=Path("./data/settings.db"), description="配置文档 SQLite 文件"
    )

    # 日志
    log_level: str = Field(default="INFO", description="日志级别")

    # 子配置
    twelvedata: TwelveDataSettings = Field(default_factory=TwelveDataSettings)

    @property
    def is_prod(self) -> bool:
        """是否为生产环境"""
        return self.env == Environment.PROD

    @property
    def is_dev(self) -> bool:
        """是否为开发环境"""
        return self.env == Environment.DEV

    def ensure_dirs(self) -> None:
        """确保必要目录存在"""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.settings_db.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """
    获取配置单例

    使用 lru_cache 确保配置只加载一次

    Returns:
        Settings: 配置实例
    """
    return Settings()
