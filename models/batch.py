# -*- coding: utf-8 -*-
"""批处理结果模型"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """失败类型"""
    SERVICE_UNREACHABLE = "service_unreachable"
    GENERATION_FAILED = "generation_failed"
    IMAGE_SAVE_FAILED = "image_save_failed"


class BatchFailure(BaseModel):
    """一次失败记录"""
    kind: FailureKind
    message: str
    batch_index: Optional[int] = None
    image_index: Optional[int] = None


class BatchResult(BaseModel):
    """一次批处理的计数器，仅在 run_batch 期间存在"""
    output_dir: str
    total_images: int = 0
    successful_images: int = 0
    skipped_prompts: int = 0
    saved_paths: List[str] = Field(default_factory=list)
    failures: List[BatchFailure] = Field(default_factory=list)
    aborted: bool = False
    cancelled: bool = False

    @property
    def failed_images(self) -> int:
        return self.total_images - self.successful_images

    def record_failure(self, kind: FailureKind, message: str,
                       batch_index: Optional[int] = None, image_index: Optional[int] = None):
        self.failures.append(BatchFailure(
            kind=kind,
            message=message,
            batch_index=batch_index,
            image_index=image_index,
        ))
