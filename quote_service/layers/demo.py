"""
演示数据层
数据源不可用或未配置时生成模拟日线：101 个连续自然日，以今天结束。
纯计算，无网络、无配置依赖；每次调用结果不同，因此不写入缓存。
"""

import logging
from datetime import date, timedelta
from typing import Optional

import numpy as np

from quote_service.models.market import DailyBar, Quote, Series

logger = logging.getLogger(__name__)

DEMO_DAYS = 101
BASE_PRICE = 150.0
AMPLITUDE = 20.0
NOISE = 5.0
MIN_VOLUME = 500_000
MAX_VOLUME = 1_500_000


class DemoGenerator:
    """模拟行情生成器"""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self._rng = rng or np.random.default_rng()

    def generate(self, symbol: str, today: Optional[date] = None) -> Series:
        today = today or date.today()
        bars = {}
        # i 为距今天数：100 → 0
        for i in range(DEMO_DAYS - 1, -1, -1):
            day = today - timedelta(days=i)
            base = BASE_PRICE + np.sin(i / 10) * AMPLITUDE
            price = round(base + self._rng.uniform(-NOISE, NOISE), 2)
            bars[day] = DailyBar(
                date=day,
                open=price,
                high=price + self._rng.uniform(0, NOISE),
                low=price - self._rng.uniform(0, NOISE),
                close=price,
                volume=int(self._rng.integers(MIN_VOLUME, MAX_VOLUME)),
            )
        return Series(symbol=symbol, bars=bars)

    def generate_with_quote(self, symbol: str, today: Optional[date] = None):
        series = self.generate(symbol, today=today)
        logger.info(f"{symbol} 使用演示数据（{len(series)} 条）")
        return series, Quote.from_series(series)


# ── 模块级别单例 ──────────────────────────────────────────
_demo: Optional[DemoGenerator] = None


def get_demo_generator() -> DemoGenerator:
    global _demo
    if _demo is None:
        _demo = DemoGenerator()
    return _demo
