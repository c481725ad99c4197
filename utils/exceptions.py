"""自定义异常类"""
from typing import List, Optional
from models.base import ErrorCode, ErrorMessage


class BusinessException(Exception):
    """业务异常基类"""
    def __init__(self, message: str, code: int = ErrorCode.INTERNAL_ERROR, details: Optional[dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# ===== 配置阶段（致命，发生在任何网络请求之前） =====

class ConfigNotFoundException(BusinessException):
    """配置文件不存在"""
    def __init__(self, path: str):
        super().__init__(
            message=f"{ErrorMessage.CONFIG_NOT_FOUND}: {path}",
            code=ErrorCode.CONFIG_NOT_FOUND,
            details={"error_type": "config_not_found", "path": path}
        )


class ConfigParseException(BusinessException):
    """配置文件不是合法JSON"""
    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"{ErrorMessage.CONFIG_PARSE_ERROR}: {reason}",
            code=ErrorCode.CONFIG_PARSE_ERROR,
            details={"error_type": "config_parse_error", "path": path}
        )


class ConfigReadException(BusinessException):
    """其他读取错误（权限、目录等）"""
    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"{ErrorMessage.CONFIG_READ_ERROR}: {reason}",
            code=ErrorCode.CONFIG_READ_ERROR,
            details={"error_type": "config_read_error", "path": path}
        )


class ConfigValidationException(BusinessException):
    """配置结构校验失败，errors 中逐条列出元素序号和约束"""
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(
            message=f"{ErrorMessage.CONFIG_VALIDATION_ERROR}: " + "; ".join(self.errors),
            code=ErrorCode.VALIDATION_ERROR,
            details={"error_type": "config_validation_error", "errors": self.errors}
        )


# ===== 批处理阶段 =====

class ServiceUnreachableException(BusinessException):
    """WebUI 不可达，整个批处理中止"""
    def __init__(self, url: str):
        super().__init__(
            message=f"{ErrorMessage.SERVICE_UNAVAILABLE}: {url}",
            code=ErrorCode.SERVICE_UNAVAILABLE,
            details={"error_type": "service_unreachable", "url": url}
        )


class GenerationRequestException(BusinessException):
    """单个提示词的生成请求失败"""
    def __init__(self, message: str = ErrorMessage.IMAGE_GENERATE_FAILED,
                 status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(
            message=message,
            code=ErrorCode.IMAGE_GENERATE_FAILED,
            details={"error_type": "generation_failed", "status_code": status_code, "body": body}
        )


class ImageSaveException(BusinessException):
    """单张图片解码或写入失败"""
    def __init__(self, message: str = ErrorMessage.IMAGE_SAVE_FAILED):
        super().__init__(
            message=message,
            code=ErrorCode.IMAGE_SAVE_FAILED,
            details={"error_type": "image_save_failed"}
        )
