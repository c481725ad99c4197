# -*- coding: utf-8 -*-
"""图片相关模型"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from models.prompt import GenerationParams


class ImageFormat(str, Enum):
    """根据文件头识别的图片格式"""
    PNG = "PNG"
    JPEG = "JPEG"
    WEBP = "WebP"
    UNKNOWN = "unknown"


class ImageMetadata(BaseModel):
    """图片旁的 JSON 元数据，写入后不再修改"""
    prompt: str
    negative_prompt: str = ""
    parameters: GenerationParams = Field(default_factory=dict)
    model: Optional[str] = None
    generation_time: str = Field(..., description="ISO-8601 UTC 时间")
    batch_index: int = Field(..., ge=1, description="提示词序号（从1开始）")
    image_index: int = Field(..., ge=1, description="图片序号（从1开始）")
