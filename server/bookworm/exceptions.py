"""业务异常体系 - 由 main.py 中的异常处理器统一转换为 JSON 响应"""


class AppError(Exception):
    """所有业务异常的基类"""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """请求字段缺失或不合法"""

    status_code = 400
    code = "VALIDATION_ERROR"


class ConflictError(AppError):
    """唯一性冲突（邮箱/用户名已存在）"""

    status_code = 400
    code = "CONFLICT"


class AuthError(AppError):
    """凭据错误或 Token 无效"""

    status_code = 400
    code = "AUTH_ERROR"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class UpstreamError(AppError):
    """外部图床调用失败"""

    status_code = 500
    code = "UPSTREAM_ERROR"


class InternalError(AppError):
    status_code = 500
    code = "INTERNAL_ERROR"
