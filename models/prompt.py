# -*- coding: utf-8 -*-
"""提示词与生成参数模型"""
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


# 生成参数是扁平字典，直接透传给 WebUI
GenerationParams = Dict[str, Any]

# 保留键：指定模型 checkpoint，发送生成请求前会被移除
MODEL_PARAM_KEY = "model"

DEFAULT_GENERATION_PARAMS: GenerationParams = {
    "steps": 20,
    "sampler_name": "DPM++ 2M Karras",
    "cfg_scale": 7,
    "width": 512,
    "height": 512,
    "batch_size": 1,
    "n_iter": 1,
    "seed": -1,
    "restore_faces": False,
    "tiling": False,
    "enable_hr": False,
}


class PromptRequest(BaseModel):
    """单个生成任务（提示词描述）"""
    model_config = ConfigDict(frozen=True)

    prompt: str = Field("", description="提示词")
    negative_prompt: str = Field("", description="反向提示词")
    params: GenerationParams = Field(default_factory=dict, description="覆盖默认值的生成参数")


def build_generation_payload(
    prompt: str,
    negative_prompt: str = "",
    custom_params: Optional[GenerationParams] = None,
) -> Tuple[GenerationParams, Optional[str]]:
    """
    合并默认参数与自定义参数
    :return: (发送给 WebUI 的参数, 指定的模型名或 None)
    """
    api_params = dict(custom_params or {})
    model = api_params.pop(MODEL_PARAM_KEY, None)

    payload = {
        "prompt": prompt,
        "negative_prompt": negative_prompt,
        **DEFAULT_GENERATION_PARAMS,
        **api_params,
    }
    return payload, model
