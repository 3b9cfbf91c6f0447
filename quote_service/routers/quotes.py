"""
行情路由
GET /api/quotes/{symbol}   - 获取日线序列与最新报价
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from quote_service.config import settings
from quote_service.exceptions import QuoteServiceError
from quote_service.layers.processing import get_processing_layer
from quote_service.models.market import ProviderKind
from quote_service.models.response import ApiResponse
from quote_service.services.market_data_service import get_market_data_service

router = APIRouter(prefix="/api/quotes", tags=["行情数据"])


def resolve_provider(provider: Optional[ProviderKind]) -> ProviderKind:
    """未指定数据源时使用配置中的默认数据源"""
    if provider is not None:
        return provider
    try:
        return ProviderKind(settings.DEFAULT_PROVIDER)
    except ValueError:
        return ProviderKind.YAHOO


@router.get("/{symbol}", response_model=ApiResponse)
async def get_quote(
    symbol: str,
    provider: Optional[ProviderKind] = Query(
        default=None, description="数据源: yahoo / alpha_vantage，默认取配置"
    ),
    force_refresh: bool = Query(default=False),
):
    """获取日线序列（按日期升序）与最新报价"""
    svc = get_market_data_service()
    try:
        resolved = await svc.resolve(symbol, resolve_provider(provider), force_refresh=force_refresh)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except QuoteServiceError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))

    records = get_processing_layer().to_records(resolved.series)
    return ApiResponse.ok(
        data={
            "symbol": resolved.series.symbol,
            "origin": resolved.origin.value,
            "provider": resolved.provider.value if resolved.provider else None,
            "quote": resolved.quote.model_dump(),
            "count": len(records),
            "data": records,
        },
        message=resolved.notice,
    )
