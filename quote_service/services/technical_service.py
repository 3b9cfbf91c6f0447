"""
技术分析服务
整合行情解析 + 处理层 + 分析层，输出看板所需的完整数据
"""

import logging
from typing import Any, Dict, Optional, Sequence

from quote_service.layers.analysis import (
    DEFAULT_MA_PERIODS,
    DEFAULT_RSI_PERIOD,
    get_analysis_layer,
)
from quote_service.layers.processing import get_processing_layer
from quote_service.models.market import ProviderKind
from quote_service.services.market_data_service import (
    MarketDataService,
    get_market_data_service,
)

logger = logging.getLogger(__name__)


class TechnicalService:
    """技术分析服务"""

    def __init__(self, market_data: Optional[MarketDataService] = None):
        self._proc = get_processing_layer()
        self._analysis = get_analysis_layer()
        self._market_data = market_data or get_market_data_service()

    async def get_dashboard(
        self,
        symbol: str,
        provider: ProviderKind = ProviderKind.YAHOO,
        ma_periods: Sequence[int] = DEFAULT_MA_PERIODS,
        rsi_period: int = DEFAULT_RSI_PERIOD,
        force_refresh: bool = False,
    ) -> Dict[str, Any]:
        """
        获取看板数据

        Returns:
            {
                "symbol": "...",
                "origin": "cached|live|demo",
                "quote": {...},
                "summary": {"high": ..., "low": ..., "volume": ...},
                "indicators": {"MA20": ..., "MA50": ..., "RSI14": ...},
                "chart": {"labels": [...], "prices": [...], "moving_averages": {...}}
            }
        """
        resolved = await self._market_data.resolve(symbol, provider, force_refresh=force_refresh)
        series = resolved.series

        # 指标基于完整序列，图表均线基于最近窗口
        indicators = self._analysis.compute(series, ma_periods=ma_periods, rsi_period=rsi_period)

        return {
            "symbol": series.symbol,
            "origin": resolved.origin.value,
            "provider": resolved.provider.value if resolved.provider else None,
            "notice": resolved.notice,
            "quote": resolved.quote.model_dump(),
            "summary": self._proc.price_summary(series),
            "indicators": self._analysis.to_indicator_summary(indicators),
            "chart": self._proc.chart_window(series, ma_periods=ma_periods),
        }


# ── 模块级别单例 ──────────────────────────────────────────
_technical_service: Optional[TechnicalService] = None


def get_technical_service() -> TechnicalService:
    global _technical_service
    if _technical_service is None:
        _technical_service = TechnicalService()
    return _technical_service
