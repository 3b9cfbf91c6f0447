"""
Layer 1 – 数据获取层
从 Yahoo Finance（经 CORS 代理）/ Alpha Vantage 拉取原始行情，
统一规范化为 Series + Quote 后向上层提供标准接口。
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import httpx

from quote_service.config import is_configured_key, settings
from quote_service.exceptions import (
    MalformedResponseError,
    NotFoundError,
    ProxyError,
    RateLimitedError,
    TransportError,
    UnconfiguredError,
)
from quote_service.models.market import DailyBar, ProviderKind, Quote, Series

logger = logging.getLogger(__name__)

SeriesAndQuote = Tuple[Series, Quote]


class ProviderAdapter(ABC):
    """数据源适配器：股票代码 → (Series, Quote)"""

    kind: ProviderKind

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @abstractmethod
    async def fetch_series(self, symbol: str) -> SeriesAndQuote:
        ...

    async def _get_json(self, url: str, params: Dict[str, str], symbol: str) -> Any:
        try:
            resp = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"{self.kind.label} 请求失败: {exc}", symbol) from exc
        if not resp.is_success:
            raise TransportError(
                f"{self.kind.label} HTTP error! status: {resp.status_code}",
                symbol,
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponseError(f"{self.kind.label} 返回了非 JSON 内容", symbol) from exc


# ── Yahoo Finance ─────────────────────────────────────────

class YahooChartAdapter(ProviderAdapter):
    """Yahoo Finance 非官方 chart 接口，通过 allorigins 代理访问"""

    kind = ProviderKind.YAHOO

    def __init__(
        self,
        client: httpx.AsyncClient,
        chart_url: Optional[str] = None,
        proxy_url: Optional[str] = None,
    ):
        super().__init__(client)
        self._chart_url = (chart_url or settings.YAHOO_CHART_URL).rstrip("/")
        self._proxy_url = proxy_url or settings.PROXY_URL

    async def fetch_series(self, symbol: str) -> SeriesAndQuote:
        proxy_data = await self._get_json(
            self._proxy_url, {"url": f"{self._chart_url}/{symbol}"}, symbol
        )
        contents = proxy_data.get("contents") if isinstance(proxy_data, dict) else None
        if not contents:
            raise ProxyError("代理服务器未返回数据", symbol)
        try:
            data = json.loads(contents)
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError("代理返回内容不是有效 JSON", symbol) from exc

        results = ((data or {}).get("chart") or {}).get("result") or []
        if not results:
            raise NotFoundError(f"找不到股票代码: {symbol}", symbol)

        try:
            series = self._parse_series(symbol, results[0])
            quote = self._parse_quote(symbol, results[0]["meta"])
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise MalformedResponseError(f"Yahoo Finance 数据结构异常: {exc}", symbol) from exc

        logger.info(f"Yahoo Finance 数据获取成功: {symbol}，共 {len(series)} 条")
        return series, quote

    @staticmethod
    def _parse_series(symbol: str, result: Dict[str, Any]) -> Series:
        quotes = result["indicators"]["quote"][0]
        timestamps = result["timestamp"]
        opens, highs, lows = quotes.get("open") or [], quotes.get("high") or [], quotes.get("low") or []
        closes, volumes = quotes["close"], quotes.get("volume") or []

        def _at(values, i):
            return values[i] if i < len(values) else None

        bars: Dict[Any, DailyBar] = {}
        for i, ts in enumerate(timestamps):
            close = _at(closes, i)
            # 半日市 / 停牌日收盘价为 null，直接丢弃
            if close is None:
                continue
            day = datetime.fromtimestamp(ts, tz=timezone.utc).date()
            bars[day] = DailyBar(
                date=day,
                open=_at(opens, i) or close,
                high=_at(highs, i) or close,
                low=_at(lows, i) or close,
                close=close,
                volume=int(_at(volumes, i) or 0),
            )
        return Series(symbol=symbol, bars=bars)

    @staticmethod
    def _parse_quote(symbol: str, meta: Dict[str, Any]) -> Quote:
        price = meta["regularMarketPrice"]
        previous_close = meta.get("previousClose")
        if previous_close is None:
            previous_close = meta["chartPreviousClose"]
        return Quote.from_previous_close(symbol, float(price), float(previous_close))


# ── Alpha Vantage ─────────────────────────────────────────

class AlphaVantageAdapter(ProviderAdapter):
    """Alpha Vantage：日线 + 全局报价两次调用，需要 API Key"""

    kind = ProviderKind.ALPHA_VANTAGE

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(client)
        self._api_key = settings.ALPHA_VANTAGE_API_KEY if api_key is None else api_key
        self._base_url = base_url or settings.ALPHA_VANTAGE_URL

    @property
    def configured(self) -> bool:
        return is_configured_key(self._api_key)

    async def fetch_series(self, symbol: str) -> SeriesAndQuote:
        if not self.configured:
            raise UnconfiguredError("ALPHA_VANTAGE_API_KEY 未配置", symbol)

        # 两次调用顺序执行，任一失败即整体失败
        daily = await self._query("TIME_SERIES_DAILY", symbol)
        series = self._parse_series(symbol, daily)
        global_quote = await self._query("GLOBAL_QUOTE", symbol)
        quote = self._parse_quote(symbol, global_quote.get("Global Quote") or {}, series)

        logger.info(f"Alpha Vantage 数据获取成功: {symbol}，共 {len(series)} 条")
        return series, quote

    async def _query(self, function: str, symbol: str) -> Dict[str, Any]:
        data = await self._get_json(
            self._base_url,
            {"function": function, "symbol": symbol, "apikey": self._api_key},
            symbol,
        )
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Alpha Vantage {function} 响应不是对象", symbol)
        if data.get("Error Message"):
            raise NotFoundError(f"找不到股票代码: {symbol}", symbol)
        if data.get("Note") or data.get("Information"):
            raise RateLimitedError(
                f"API call frequency exceeded: {data.get('Note') or data.get('Information')}",
                symbol,
            )
        return data

    @staticmethod
    def _parse_series(symbol: str, data: Dict[str, Any]) -> Series:
        raw = data.get("Time Series (Daily)")
        if not isinstance(raw, dict):
            raise MalformedResponseError("缺少 Time Series (Daily) 字段", symbol)
        bars = {}
        try:
            for day_str, row in raw.items():
                day = datetime.strptime(day_str, "%Y-%m-%d").date()
                bars[day] = DailyBar(
                    date=day,
                    open=float(row["1. open"]),
                    high=float(row["2. high"]),
                    low=float(row["3. low"]),
                    close=float(row["4. close"]),
                    volume=int(float(row.get("5. volume") or 0)),
                )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedResponseError(f"Alpha Vantage 日线数据异常: {exc}", symbol) from exc
        if not bars:
            raise MalformedResponseError("Time Series (Daily) 为空", symbol)
        return Series(symbol=symbol, bars=bars)

    @staticmethod
    def _parse_quote(symbol: str, raw: Any, series: Series) -> Quote:
        if not raw:
            # 全局报价为空时由日线推导
            return Quote.from_series(series)
        if not isinstance(raw, dict):
            raise MalformedResponseError("Global Quote 字段不是对象", symbol)
        try:
            return Quote(
                symbol=raw.get("01. symbol") or symbol,
                price=float(raw["05. price"]),
                change=float(raw["09. change"]),
                change_percent=float(str(raw["10. change percent"]).rstrip("%")),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise MalformedResponseError(f"Alpha Vantage 报价数据异常: {exc}", symbol) from exc


class AcquisitionLayer:
    """数据获取层：持有共享 HTTP 客户端，按数据源类型分发适配器"""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
    ):
        self._client = client
        self._api_key = settings.ALPHA_VANTAGE_API_KEY if api_key is None else api_key
        self._adapters: Dict[ProviderKind, ProviderAdapter] = {}

    def _ensure_adapters(self) -> None:
        # 客户端关闭后（应用重启）重新创建
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, follow_redirects=True)
            self._adapters = {}
        if not self._adapters:
            self._adapters = {
                ProviderKind.YAHOO: YahooChartAdapter(self._client),
                ProviderKind.ALPHA_VANTAGE: AlphaVantageAdapter(self._client, api_key=self._api_key),
            }

    def adapter(self, kind: ProviderKind) -> ProviderAdapter:
        self._ensure_adapters()
        return self._adapters[ProviderKind(kind)]

    @property
    def alpha_vantage_configured(self) -> bool:
        return is_configured_key(self._api_key)

    async def fetch_series(self, kind: ProviderKind, symbol: str) -> SeriesAndQuote:
        return await self.adapter(kind).fetch_series(symbol)

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.info("HTTP 客户端已关闭")


# ── 模块级别单例 ──────────────────────────────────────────
_acquisition: Optional[AcquisitionLayer] = None


def get_acquisition_layer() -> AcquisitionLayer:
    global _acquisition
    if _acquisition is None:
        _acquisition = AcquisitionLayer()
    return _acquisition


async def close_acquisition_layer() -> None:
    if _acquisition is not None:
        await _acquisition.aclose()
