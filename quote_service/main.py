"""
股价行情服务
独立 FastAPI 应用程序入口

启动方式:
    uvicorn quote_service.main:app --host 0.0.0.0 --port 8001
    python -m quote_service.main
"""

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quote_service import __version__
from quote_service.config import settings
from quote_service.layers.acquisition import close_acquisition_layer
from quote_service.models.response import ApiResponse
from quote_service.routers import cache, health, quotes, technical

# ── 日志配置 ──────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── 生命周期管理 ──────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用启动/关闭生命周期钩子"""
    logger.info(f"🚀 QuoteService v{__version__} 启动，默认数据源 {settings.DEFAULT_PROVIDER}")
    logger.info(f"📡 Yahoo Finance: {settings.YAHOO_CHART_URL}（代理 {settings.PROXY_URL}）")
    logger.info(
        f"📡 Alpha Vantage: {settings.ALPHA_VANTAGE_URL}"
        f"（API Key {'已配置' if settings.ALPHA_VANTAGE_CONFIGURED else '未配置'}）"
    )
    logger.info(
        f"🗄️ 行情缓存: TTL {settings.CACHE_TTL}s，上限 {settings.CACHE_MAXSIZE} 条，"
        f"HTTP 超时 {settings.HTTP_TIMEOUT}s"
    )

    if not settings.ALPHA_VANTAGE_CONFIGURED:
        logger.warning("⚠️ 未配置 ALPHA_VANTAGE_API_KEY，Alpha Vantage 查询将使用演示数据")

    yield

    logger.info("🔄 行情服务正在关闭...")
    await close_acquisition_layer()
    logger.info("✅ 行情服务已关闭")


# ── 应用实例 ──────────────────────────────────────────────
app = FastAPI(
    title="QuoteService 股价行情服务",
    description=(
        "股票日线行情与技术指标微服务，提供以下功能：\n"
        "- 📊 日线行情（Yahoo Finance / Alpha Vantage）\n"
        "- 🗄️ 5 分钟行情缓存\n"
        "- 🧪 数据源不可用时的演示数据\n"
        "- 📈 技术指标（MA / RSI）\n\n"
        "**分层架构**\n"
        "```\n"
        "Acquisition Layer  ← 从数据源拉取原始行情\n"
        "Cache Layer        ← 进程内 TTL 缓存\n"
        "Processing Layer   ← 排序、摘要、图表窗口\n"
        "Analysis Layer     ← 技术指标计算\n"
        "```"
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS 中间件 ───────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── 请求计时中间件 ─────────────────────────────────────────
@app.middleware("http")
async def add_process_time(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = f"{(time.time() - start) * 1000:.1f}ms"
    return response


# ── 全局异常处理 ──────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"未处理的异常: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=ApiResponse.from_exception(exc).model_dump(),
    )


# ── 注册路由 ──────────────────────────────────────────────
app.include_router(health.router)
app.include_router(quotes.router)
app.include_router(technical.router)
app.include_router(cache.router)


# ── 根路由 ───────────────────────────────────────────────
@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": "QuoteService",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


# ── 直接运行入口 ──────────────────────────────────────────
if __name__ == "__main__":
    uvicorn.run(
        "quote_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
