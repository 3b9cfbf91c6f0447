"""
行情数据服务（回退编排）
整合缓存、数据获取、演示数据三层，决定一次查询的数据来源：

  缓存 → 选定数据源 → 演示数据

  - Yahoo Finance：任何失败都回退到演示数据，不向调用方抛出
  - Alpha Vantage：未配置 Key 直接使用演示数据；NotFound / RateLimited
    回退到演示数据；其余错误原样上抛
  - 演示数据永不缓存
"""

import logging
from typing import Optional

from quote_service.exceptions import NotFoundError, RateLimitedError
from quote_service.layers.acquisition import AcquisitionLayer, get_acquisition_layer
from quote_service.layers.cache import CacheLayer, get_cache_layer
from quote_service.layers.demo import DemoGenerator, get_demo_generator
from quote_service.models.market import Origin, ProviderKind, ResolvedSeries

logger = logging.getLogger(__name__)


def normalize_symbol(symbol: str) -> str:
    symbol = (symbol or "").strip().upper()
    if not symbol:
        raise ValueError("请输入股票代码")
    return symbol


class MarketDataService:
    """
    行情数据业务服务

    一个实例即一个会话上下文（缓存 + 数据源），同一进程内只构造一次。
    """

    def __init__(
        self,
        cache: Optional[CacheLayer] = None,
        acquisition: Optional[AcquisitionLayer] = None,
        demo: Optional[DemoGenerator] = None,
    ):
        self._cache = cache or get_cache_layer()
        self._acq = acquisition or get_acquisition_layer()
        self._demo = demo or get_demo_generator()

    @property
    def cache(self) -> CacheLayer:
        return self._cache

    async def resolve(
        self,
        symbol: str,
        provider: ProviderKind = ProviderKind.YAHOO,
        force_refresh: bool = False,
    ) -> ResolvedSeries:
        """
        解析一只股票的日线与最新报价

        Args:
            symbol: 股票代码（自动去空格并转大写）
            provider: 首选数据源
            force_refresh: 跳过缓存

        Raises:
            ValueError: 股票代码为空
            QuoteServiceError: Alpha Vantage 返回了不可恢复的错误
        """
        symbol = normalize_symbol(symbol)
        provider = ProviderKind(provider)

        if not force_refresh:
            entry = self._cache.get(symbol, provider)
            if entry is not None:
                return ResolvedSeries(
                    series=entry.series, quote=entry.quote,
                    origin=Origin.CACHED, provider=provider,
                )

        if provider is ProviderKind.YAHOO:
            try:
                series, quote = await self._acq.fetch_series(provider, symbol)
            except Exception as exc:
                logger.warning(f"Yahoo Finance API 获取失败（{symbol}），使用演示数据: {exc}")
                return self._use_demo(symbol)
        else:
            if not self._acq.alpha_vantage_configured:
                logger.info(f"Alpha Vantage 未配置 API Key，{symbol} 使用演示数据")
                return self._use_demo(symbol)
            try:
                series, quote = await self._acq.fetch_series(provider, symbol)
            except (NotFoundError, RateLimitedError) as exc:
                logger.warning(f"Alpha Vantage 获取失败（{symbol}），使用演示数据: {exc}")
                return self._use_demo(symbol)

        self._cache.put(symbol, provider, series, quote)
        return ResolvedSeries(series=series, quote=quote, origin=Origin.LIVE, provider=provider)

    def _use_demo(self, symbol: str) -> ResolvedSeries:
        series, quote = self._demo.generate_with_quote(symbol)
        return ResolvedSeries(series=series, quote=quote, origin=Origin.DEMO)


# ── 模块级别单例 ──────────────────────────────────────────
_market_data_service: Optional[MarketDataService] = None


def get_market_data_service() -> MarketDataService:
    global _market_data_service
    if _market_data_service is None:
        _market_data_service = MarketDataService()
    return _market_data_service
