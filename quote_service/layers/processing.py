"""
Layer 3 – 数据处理层
将 Series 转换为按日期排序的视图：DataFrame、价格摘要、图表窗口。
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from quote_service.config import settings
from quote_service.layers.analysis import DEFAULT_MA_PERIODS, AnalysisLayer, moving_average
from quote_service.models.market import Series

logger = logging.getLogger(__name__)

_COLUMNS = ["date", "open", "high", "low", "close", "volume"]


class ProcessingLayer:
    """数据处理层：排序 + 摘要 + 图表数据"""

    def to_frame(self, series: Series) -> pd.DataFrame:
        """Series 转为按日期升序的 DataFrame"""
        if not len(series):
            return pd.DataFrame(columns=_COLUMNS)
        df = pd.DataFrame([bar.model_dump() for bar in series.sorted_bars()], columns=_COLUMNS)
        return df.reset_index(drop=True)

    def to_records(self, series: Series) -> List[Dict[str, Any]]:
        """按日期升序的字典列表，日期格式 YYYY-MM-DD"""
        return [
            {**bar.model_dump(), "date": bar.date.isoformat()}
            for bar in series.sorted_bars()
        ]

    def price_summary(self, series: Series) -> Dict[str, Any]:
        """区间最高价 / 最低价 / 最新成交量"""
        df = self.to_frame(series)
        if df.empty:
            return {"high": None, "low": None, "volume": None, "count": 0}
        return {
            "high": round(float(df["high"].max()), 2),
            "low": round(float(df["low"].min()), 2),
            "volume": int(df["volume"].iloc[-1]),
            "count": len(df),
        }

    def chart_window(
        self,
        series: Series,
        days: Optional[int] = None,
        ma_periods: Sequence[int] = DEFAULT_MA_PERIODS,
    ) -> Dict[str, Any]:
        """
        取最近 days 个交易日作为图表数据

        标签格式为 M/D；均线在窗口内计算，窗口短于周期时全部为 None。
        """
        if days is None:
            days = settings.CHART_WINDOW_DAYS
        df = self.to_frame(series).tail(days)
        prices = [float(p) for p in df["close"]]
        labels = [f"{d.month}/{d.day}" for d in df["date"]]
        return {
            "labels": labels,
            "dates": [d.isoformat() for d in df["date"]],
            "prices": prices,
            "moving_averages": {
                f"MA{p}": AnalysisLayer.json_safe(moving_average(prices, p))
                for p in ma_periods
            },
        }


# ── 模块级别单例 ──────────────────────────────────────────
_processing: Optional[ProcessingLayer] = None


def get_processing_layer() -> ProcessingLayer:
    global _processing
    if _processing is None:
        _processing = ProcessingLayer()
    return _processing
