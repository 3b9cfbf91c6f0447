"""
行情数据流分层架构
  Layer 1 – Acquisition  : 数据获取（Yahoo Finance / Alpha Vantage）
  Layer 2 – Cache        : 进程内 TTL 缓存
  Layer 3 – Processing   : 序列排序、摘要与图表数据
  Layer 4 – Analysis     : 技术指标计算（MA / RSI）
  Demo                   : 模拟行情生成
"""
