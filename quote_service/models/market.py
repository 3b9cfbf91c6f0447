"""
行情领域模型
DailyBar / Series / Quote / CacheEntry / ResolvedSeries / IndicatorSet
"""

import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def round_price(value: float) -> float:
    """价格类字段统一保留 2 位小数"""
    return round(float(value), 2)


class ProviderKind(str, Enum):
    """行情数据源：YAHOO 为主数据源（免费，经代理），ALPHA_VANTAGE 为备用数据源（需 Key）"""
    YAHOO = "yahoo"
    ALPHA_VANTAGE = "alpha_vantage"

    @property
    def label(self) -> str:
        return "Yahoo Finance" if self is ProviderKind.YAHOO else "Alpha Vantage"


class Origin(str, Enum):
    """解析结果来源"""
    CACHED = "cached"
    LIVE = "live"
    DEMO = "demo"


class DailyBar(BaseModel):
    """单日 K 线"""

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    open: float = Field(ge=0)
    high: float = Field(ge=0)
    low: float = Field(ge=0)
    close: float = Field(ge=0)
    volume: int = Field(default=0, ge=0)

    @field_validator("open", "high", "low", "close")
    @classmethod
    def _two_decimals(cls, v: float) -> float:
        return round_price(v)


class Series(BaseModel):
    """单一股票、单一来源的日线序列（日期 → DailyBar），生成后不再修改"""

    model_config = ConfigDict(frozen=True)

    symbol: str
    bars: Dict[datetime.date, DailyBar] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.bars)

    def sorted_bars(self) -> List[DailyBar]:
        return [self.bars[d] for d in sorted(self.bars)]

    def dates(self) -> List[datetime.date]:
        return sorted(self.bars)

    def closes(self) -> List[float]:
        """按日期升序排列的收盘价"""
        return [bar.close for bar in self.sorted_bars()]


class Quote(BaseModel):
    """最新行情快照"""

    model_config = ConfigDict(frozen=True)

    symbol: str
    price: float
    change: float
    change_percent: float

    @field_validator("price", "change", "change_percent")
    @classmethod
    def _two_decimals(cls, v: float) -> float:
        return round_price(v)

    @classmethod
    def from_previous_close(cls, symbol: str, price: float, previous_close: float) -> "Quote":
        change = price - previous_close
        percent = change / previous_close * 100 if previous_close else 0.0
        return cls(symbol=symbol, price=price, change=change, change_percent=percent)

    @classmethod
    def from_series(cls, series: Series) -> "Quote":
        """由序列最后两个交易日推导快照"""
        closes = series.closes()
        if not closes:
            raise ValueError(f"序列为空，无法生成行情快照: {series.symbol}")
        previous = closes[-2] if len(closes) > 1 else closes[-1]
        return cls.from_previous_close(series.symbol, closes[-1], previous)


class CacheEntry(BaseModel):
    """缓存条目，fetched_at 为写入时的 UNIX 时间戳（秒）"""

    model_config = ConfigDict(frozen=True)

    series: Series
    quote: Quote
    fetched_at: float


class ResolvedSeries(BaseModel):
    """回退编排的最终结果"""

    model_config = ConfigDict(frozen=True)

    series: Series
    quote: Quote
    origin: Origin
    provider: Optional[ProviderKind] = None

    @property
    def notice(self) -> str:
        symbol = self.series.symbol
        if self.origin is Origin.CACHED:
            return f"{symbol} 显示的是缓存数据"
        if self.origin is Origin.LIVE:
            return f"{symbol} 已获取实时数据（{self.provider.label}）"
        return f"{symbol} 显示的是演示数据，获取真实数据需要可用的数据源或 Alpha Vantage API Key"


class IndicatorSet(BaseModel):
    """技术指标集合，各序列与输入价格逐位对齐"""

    moving_averages: Dict[int, List[Optional[float]]] = Field(default_factory=dict)
    rsi_period: int = 14
    rsi: List[Optional[float]] = Field(default_factory=list)

    def latest(self) -> Dict[str, Optional[float]]:
        result: Dict[str, Optional[float]] = {}
        for period, values in self.moving_averages.items():
            result[f"MA{period}"] = values[-1] if values else None
        result[f"RSI{self.rsi_period}"] = self.rsi[-1] if self.rsi else None
        return result
