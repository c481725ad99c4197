from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from enum import Enum


# ==================================
# 枚举
# ==================================
class LogLevel(str, Enum):
    """日志级别枚举"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ==================================
# 配置模型
# ==================================
class AppConfig(BaseModel):
    """应用配置"""
    version: str = Field(default="1.0.0", description="版本号")


class WebUIConfig(BaseModel):
    """Stable Diffusion WebUI 连接配置"""
    url: str = Field(default="http://127.0.0.1:7860", description="WebUI 基础URL")
    api_endpoint: str = Field(default="/sdapi/v1/txt2img", description="生成接口路径")
    timeout: float = Field(default=300, description="生成请求超时时间(秒)")
    status_timeout: float = Field(default=10, description="状态/列表请求超时时间(秒)")
    model_settle_delay: float = Field(default=3, description="切换模型后的等待时间(秒)")


class OutputConfig(BaseModel):
    """输出配置"""
    dir: str = Field(default="./output", description="图片输出目录")
    image_prefix: str = Field(default="generated_", description="生成文件名前缀")


class BatchConfig(BaseModel):
    """批处理节奏配置"""
    image_interval: float = Field(default=1, description="同一提示词内图片之间的等待(秒)")
    item_interval: float = Field(default=2, description="提示词之间的等待(秒)")


class LoggerConfig(BaseModel):
    """日志配置"""
    level: LogLevel = Field(default=LogLevel.INFO, description="日志级别")
    to_console: bool = Field(default=True, description="是否输出到控制台")
    to_file: bool = Field(default=False, description="是否写入文件")
    file_path: str = Field(default="logs/sd_batch.log", description="日志文件路径")
    file_rotation: str = Field(default="1 day", description="文件轮转周期")
    file_retention: str = Field(default="30 days", description="文件保留时间")


# ==================================
# 全局设置
# ==================================
class GlobalSettings(BaseSettings):
    """全局配置设置"""
    app: AppConfig = Field(default_factory=AppConfig)
    webui: WebUIConfig = Field(default_factory=WebUIConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    logger: LoggerConfig = Field(default_factory=LoggerConfig)

    # 兼容旧版 .env 的扁平变量名（WEBUI_URL 等），设置后覆盖嵌套配置
    webui_url: Optional[str] = Field(default=None, description="兼容: WEBUI_URL")
    api_endpoint: Optional[str] = Field(default=None, description="兼容: API_ENDPOINT")
    output_dir: Optional[str] = Field(default=None, description="兼容: OUTPUT_DIR")
    image_prefix: Optional[str] = Field(default=None, description="兼容: IMAGE_PREFIX")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    @model_validator(mode="after")
    def apply_flat_overrides(self) -> "GlobalSettings":
        """把扁平变量合并到嵌套配置中"""
        if self.webui_url:
            self.webui.url = self.webui_url
        if self.api_endpoint:
            self.webui.api_endpoint = self.api_endpoint
        if self.output_dir:
            self.output.dir = self.output_dir
        if self.image_prefix is not None:
            self.output.image_prefix = self.image_prefix
        return self


# ==================================
# 全局实例
# ==================================
settings = GlobalSettings()
