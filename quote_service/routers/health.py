"""健康检查路由"""

import time

from fastapi import APIRouter

from quote_service import __version__
from quote_service.config import settings
from quote_service.services.market_data_service import get_market_data_service

router = APIRouter(tags=["健康检查"])


@router.get("/health")
async def health():
    """服务健康检查"""
    return {
        "success": True,
        "data": {
            "status": "ok",
            "version": __version__,
            "timestamp": int(time.time()),
            "service": "QuoteService",
            "providers": {
                "default": settings.DEFAULT_PROVIDER,
                "yahoo": {"enabled": True},
                "alpha_vantage": {"enabled": settings.ALPHA_VANTAGE_CONFIGURED},
            },
            "cache": get_market_data_service().cache.stats(),
        },
        "message": "服务运行正常",
    }


@router.get("/healthz")
async def healthz():
    """Kubernetes 存活检查"""
    return {"status": "ok"}


@router.get("/readyz")
async def readyz():
    """Kubernetes 就绪检查"""
    return {"ready": True}
