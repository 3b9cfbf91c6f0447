"""
行情服务异常定义

可恢复错误（触发演示数据回退）：
  NotFoundError / RateLimitedError / ProxyError / TransportError
Alpha Vantage 路径下仅 NotFoundError 与 RateLimitedError 被吸收，其余错误上抛。
"""

from typing import Optional


class QuoteServiceError(Exception):
    """行情服务错误基类"""

    def __init__(self, message: str, symbol: str = ""):
        super().__init__(message)
        self.symbol = symbol


class NotFoundError(QuoteServiceError):
    """数据源不认识该股票代码"""


class RateLimitedError(QuoteServiceError):
    """调用频率 / 配额超限"""


class ProxyError(QuoteServiceError):
    """代理服务未返回内容"""


class TransportError(QuoteServiceError):
    """网络错误或非 2xx 状态码"""

    def __init__(self, message: str, symbol: str = "", status_code: Optional[int] = None):
        super().__init__(message, symbol)
        self.status_code = status_code


class MalformedResponseError(QuoteServiceError):
    """响应结构不符合预期"""


class UnconfiguredError(QuoteServiceError):
    """数据源缺少必要配置（如 API Key）"""
