"""
股价行情服务
独立的行情数据微服务，提供 HTTP 接口

架构分层：
  数据获取层 (Acquisition)  → 从 Yahoo Finance / Alpha Vantage 拉取原始行情
  缓存层     (Cache)        → 进程内 TTL 缓存（5 分钟）
  演示数据层 (Demo)         → 数据源不可用时生成模拟行情
  处理层     (Processing)   → 序列排序、摘要、图表窗口
  分析层     (Analysis)     → 移动平均线 / RSI
"""

__version__ = "1.0.0"
