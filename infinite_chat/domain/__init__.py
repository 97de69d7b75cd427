"""领域层模型。

包含：
- models: 统一的 ChatMessage / ChatRequest / ChatResult / StrategyDescriptor。
- exceptions: 业务异常类型定义。
"""
