"""
技术分析路由
GET /api/technical/{symbol}  - 获取看板数据（报价 + 摘要 + 指标 + 图表）
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from quote_service.exceptions import QuoteServiceError
from quote_service.layers.analysis import DEFAULT_MA_PERIODS, DEFAULT_RSI_PERIOD
from quote_service.models.market import ProviderKind
from quote_service.models.response import ApiResponse
from quote_service.routers.quotes import resolve_provider
from quote_service.services.technical_service import get_technical_service

router = APIRouter(prefix="/api/technical", tags=["技术分析"])


def _parse_periods(raw: Optional[str]) -> List[int]:
    if not raw:
        return list(DEFAULT_MA_PERIODS)
    try:
        periods = [int(p) for p in raw.split(",") if p.strip()]
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"均线周期必须为逗号分隔的整数: {raw}",
        )
    if not periods or any(p < 1 for p in periods):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"均线周期必须为正整数: {raw}",
        )
    return periods


@router.get("/{symbol}", response_model=ApiResponse)
async def get_technical_indicators(
    symbol: str,
    provider: Optional[ProviderKind] = Query(default=None),
    ma: Optional[str] = Query(default=None, description="逗号分隔的均线周期，默认 20,50"),
    rsi: int = Query(default=DEFAULT_RSI_PERIOD, ge=1, description="RSI 周期"),
    force_refresh: bool = Query(default=False),
):
    """
    获取股票看板数据

    - `ma` 示例: `5,20,50`
    """
    periods = _parse_periods(ma)
    svc = get_technical_service()
    try:
        result = await svc.get_dashboard(
            symbol,
            provider=resolve_provider(provider),
            ma_periods=periods,
            rsi_period=rsi,
            force_refresh=force_refresh,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except QuoteServiceError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return ApiResponse.ok(data=result, message=result["notice"])
