"""
缓存管理路由
GET  /api/cache/stats     - 缓存统计
POST /api/cache/clear     - 清理缓存
"""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from quote_service.models.market import ProviderKind
from quote_service.models.response import ApiResponse
from quote_service.services.market_data_service import get_market_data_service

router = APIRouter(prefix="/api/cache", tags=["缓存管理"])


class ClearRequest(BaseModel):
    symbol: Optional[str] = None
    provider: Optional[ProviderKind] = None


@router.get("/stats", response_model=ApiResponse)
async def cache_stats():
    """获取缓存统计信息"""
    return ApiResponse.ok(data=get_market_data_service().cache.stats())


@router.post("/clear", response_model=ApiResponse)
async def clear_cache(body: ClearRequest):
    """清理指定股票的缓存；不指定股票时清空全部"""
    cache = get_market_data_service().cache
    if body.symbol:
        removed = cache.delete(body.symbol, body.provider)
        target = f"{body.symbol.upper()}:{body.provider.value if body.provider else '*'}"
    else:
        removed = cache.clear()
        target = "*"
    return ApiResponse.ok(data={"removed": removed}, message=f"缓存已清理: {target}")
