"""日志工具"""
import sys
from pathlib import Path
from typing import Optional
from contextvars import ContextVar
from loguru import logger as loguru_logger
from config.settings import settings, LoggerConfig


# 批处理运行ID上下文变量
run_id_ctx: ContextVar[Optional[str]] = ContextVar('run_id', default=None)


class LoggerWrapper:
    """带运行ID的Logger包装器"""

    def __init__(self, base_logger):
        self.base_logger = base_logger

    def _format(self, message):
        """格式化消息，有运行ID时添加前缀"""
        rid = run_id_ctx.get()
        if rid is None:
            return f"{message}"
        return f"[{rid}] {message}"

    def debug(self, message, **kwargs):
        self.base_logger.debug(self._format(message), **kwargs)

    def info(self, message, **kwargs):
        self.base_logger.info(self._format(message), **kwargs)

    def warning(self, message, **kwargs):
        self.base_logger.warning(self._format(message), **kwargs)

    def error(self, message, **kwargs):
        self.base_logger.error(self._format(message), **kwargs)

    def exception(self, message, **kwargs):
        self.base_logger.exception(self._format(message), **kwargs)

    def opt(self, **kwargs):
        """选项"""
        return LoggerWrapper(self.base_logger.opt(**kwargs))


class LoggingManager:
    """日志管理器"""

    def __init__(self, config: LoggerConfig):
        self.config = config
        self.configure()

    def configure(self, config: Optional[LoggerConfig] = None, level: Optional[str] = None):
        """
        （重新）设置日志输出
        :param config: 替换当前日志配置，脚本以注入的 settings.logger 调用
        :param level: 覆盖配置中的日志级别，命令行 --verbose 时传入 DEBUG
        """
        if config is not None:
            self.config = config
        loguru_logger.remove()
        level = level or self.config.level.value

        if self.config.to_file and self.config.file_path:
            log_file_path = Path(self.config.file_path)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            loguru_logger.add(
                str(log_file_path),
                level=level,
                rotation=self.config.file_rotation,
                retention=self.config.file_retention,
                compression="zip",
                encoding="utf-8"
            )

        if self.config.to_console:
            loguru_logger.add(
                sys.stdout,
                level=level,
                colorize=True,
                format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}"
            )

    def get_logger(self, name):
        """获取logger实例"""
        return LoggerWrapper(loguru_logger.bind(name=name)).opt(depth=1)


# 创建全局日志管理器实例
logging_manager = LoggingManager(settings.logger)

logger = logging_manager.get_logger("sd_batch")


def set_run_id(run_id: Optional[str]):
    """设置当前批处理的运行ID"""
    run_id_ctx.set(run_id)
