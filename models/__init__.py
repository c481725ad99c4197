from .prompt import PromptRequest, GenerationParams, DEFAULT_GENERATION_PARAMS, MODEL_PARAM_KEY
from .image import ImageFormat, ImageMetadata
from .batch import BatchResult, BatchFailure, FailureKind

__all__ = [
    "PromptRequest",
    "GenerationParams",
    "DEFAULT_GENERATION_PARAMS",
    "MODEL_PARAM_KEY",
    "ImageFormat",
    "ImageMetadata",
    "BatchResult",
    "BatchFailure",
    "FailureKind",
]
