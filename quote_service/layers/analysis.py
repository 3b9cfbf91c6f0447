"""
Layer 4 – 技术分析层
计算移动平均线（MA）与相对强弱指数（RSI），输出与输入价格逐位对齐，
数据不足的位置以 None 占位。
"""

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from quote_service.models.market import IndicatorSet, Series

logger = logging.getLogger(__name__)

DEFAULT_MA_PERIODS = (20, 50)
DEFAULT_RSI_PERIOD = 14


def moving_average(prices: Sequence[float], period: int) -> List[Optional[float]]:
    """简单移动平均：前 period-1 个位置为 None"""
    if period < 1:
        raise ValueError(f"period 必须为正整数: {period}")
    ma = pd.Series(prices, dtype="float64").rolling(window=period).mean()
    return [None if pd.isna(v) else float(v) for v in ma]


def rsi(prices: Sequence[float], period: int = DEFAULT_RSI_PERIOD) -> List[Optional[float]]:
    """
    Wilder 平滑 RSI

    数据不足（len < period + 1）时返回 [None]。
    平均跌幅为 0 时不做截断：RS = inf 得到 100.0，0/0 得到 nan。
    """
    if period < 1:
        raise ValueError(f"period 必须为正整数: {period}")
    if len(prices) < period + 1:
        return [None]

    delta = np.diff(np.asarray(prices, dtype="float64"))
    gains = np.where(delta > 0, delta, 0.0)
    losses = np.where(delta < 0, -delta, 0.0)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()

    result: List[Optional[float]] = [None] * period
    with np.errstate(divide="ignore", invalid="ignore"):
        result.append(_rsi_value(avg_gain, avg_loss))
        for i in range(period, len(gains)):
            avg_gain = (avg_gain * (period - 1) + gains[i]) / period
            avg_loss = (avg_loss * (period - 1) + losses[i]) / period
            result.append(_rsi_value(avg_gain, avg_loss))
    return result


def _rsi_value(avg_gain: np.float64, avg_loss: np.float64) -> float:
    rs = np.float64(avg_gain) / np.float64(avg_loss)
    return float(100 - 100 / (1 + rs))


def _finite_or_none(value: Optional[float], ndigits: int = 2) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return round(value, ndigits)


class AnalysisLayer:
    """技术分析层：在按日期排序的收盘价上计算指标"""

    def compute(
        self,
        series: Series,
        ma_periods: Sequence[int] = DEFAULT_MA_PERIODS,
        rsi_period: int = DEFAULT_RSI_PERIOD,
    ) -> IndicatorSet:
        closes = series.closes()
        return IndicatorSet(
            moving_averages={p: moving_average(closes, p) for p in ma_periods},
            rsi_period=rsi_period,
            rsi=rsi(closes, rsi_period),
        )

    def to_indicator_summary(self, indicators: IndicatorSet) -> Dict[str, Any]:
        """返回各指标最新值，非有限值（nan / inf）记为 None"""
        return {k: _finite_or_none(v) for k, v in indicators.latest().items()}

    @staticmethod
    def json_safe(values: Sequence[Optional[float]]) -> List[Optional[float]]:
        return [_finite_or_none(v) for v in values]


# ── 模块级别单例 ──────────────────────────────────────────
_analysis: Optional[AnalysisLayer] = None


def get_analysis_layer() -> AnalysisLayer:
    global _analysis
    if _analysis is None:
        _analysis = AnalysisLayer()
    return _analysis
