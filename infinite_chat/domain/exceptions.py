"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 API 层做统一捕获与日志记录。

两类失败：
- ConfigurationError: 必需凭据缺失，直接失败，不重试。
- CollaboratorError: 外部服务（代理、记忆服务、token 计数）调用失败。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "MISSING_API_KEY"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、url 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ConfigurationError(BusinessError):
    """必需配置（如 API 密钥）缺失。"""

    def __init__(self, code: str = "MISSING_API_KEY", message: str = "", http_status: int = 500, **extra):
        super().__init__(code=code, message=message, http_status=http_status, **extra)


class ValidationError(BusinessError):
    """参数校验失败。"""


class CollaboratorError(BusinessError):
    """外部服务调用失败的基类。"""


class NetworkError(CollaboratorError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(CollaboratorError):
    """第三方 API 返回非 2xx/429 错误，或响应无法解析时抛出。"""


class RateLimitError(CollaboratorError):
    """外部服务限流，由上层负责重试/退避策略。"""
