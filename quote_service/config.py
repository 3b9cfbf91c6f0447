"""
行情服务配置模块
支持从环境变量 / .env 读取配置
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Alpha Vantage 官方示例 key，视同未配置
_PLACEHOLDER_KEYS = ("", "demo")


def is_configured_key(api_key: Optional[str]) -> bool:
    """空字符串与示例 key "demo" 视同未配置"""
    return (api_key or "").strip() not in _PLACEHOLDER_KEYS


class QuoteServiceSettings(BaseSettings):
    """行情服务配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── 基础配置 ──────────────────────────────────────────
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8001)
    DEBUG: bool = Field(default=False)
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"]
    )

    # ── 数据源配置 ─────────────────────────────────────────
    DEFAULT_PROVIDER: str = Field(default="yahoo")
    ALPHA_VANTAGE_API_KEY: str = Field(default="")
    ALPHA_VANTAGE_URL: str = Field(default="https://www.alphavantage.co/query")
    YAHOO_CHART_URL: str = Field(default="https://query1.finance.yahoo.com/v8/finance/chart")
    PROXY_URL: str = Field(default="https://api.allorigins.win/get")
    HTTP_TIMEOUT: float = Field(default=15.0)      # 单次请求超时（秒）

    @property
    def ALPHA_VANTAGE_CONFIGURED(self) -> bool:
        return is_configured_key(self.ALPHA_VANTAGE_API_KEY)

    # ── 缓存配置 ──────────────────────────────────────────
    CACHE_TTL: int = Field(default=300)            # 行情缓存 TTL（秒）
    CACHE_MAXSIZE: int = Field(default=10000)       # 缓存条目上限

    # ── 图表配置 ──────────────────────────────────────────
    CHART_WINDOW_DAYS: int = Field(default=60)

    # ── 日志配置 ──────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO")


@lru_cache
def get_settings() -> QuoteServiceSettings:
    """获取全局配置（单例）"""
    return QuoteServiceSettings()


settings = get_settings()
