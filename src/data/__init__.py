"""
Data 模块 - 行情数据获取

包含:
- connectors: 数据源连接器与 API 密钥池
- fetcher: 拉取、重试、多时间框架编排与模拟数据降级
- store: 配置文档存储
- models / errors: 数据模型与异常体系
"""
