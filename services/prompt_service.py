"""提示词配置文件的读取与校验"""
import json
from pathlib import Path
from typing import Any, List, Union

from models.base import ErrorMessage
from models.prompt import PromptRequest
from utils.exceptions import (
    ConfigNotFoundException,
    ConfigParseException,
    ConfigReadException,
    ConfigValidationException,
)
from utils.logger import logger


def load_prompts_from_file(file_path: Union[str, Path]) -> Any:
    """
    读取并解析 JSON 配置文件
    :param file_path: 配置文件路径
    :return: 解析后的 JSON 值（尚未校验）
    :raises ConfigNotFoundException: 文件不存在
    :raises ConfigParseException: 内容不是合法 JSON
    :raises ConfigReadException: 其他读取错误
    """
    path = Path(file_path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigNotFoundException(str(path))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadException(str(path), str(e))

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigParseException(str(path), f"{e.msg} (line {e.lineno}, column {e.colno})")


def validate_prompts_config(prompts_config: Any) -> List[PromptRequest]:
    """
    校验配置结构并转换为 PromptRequest 列表

    收集全部错误后一次性抛出，错误信息包含元素序号（从1开始）和违反的约束。
    """
    if not isinstance(prompts_config, list):
        raise ConfigValidationException([ErrorMessage.CONFIG_NOT_ARRAY])

    errors = []
    for i, config in enumerate(prompts_config):
        index = i + 1

        if not isinstance(config, dict):
            errors.append(ErrorMessage.PROMPT_NOT_OBJECT.format(index=index))
            continue

        prompt = config.get("prompt")
        if not isinstance(prompt, str) or not prompt:
            errors.append(ErrorMessage.PROMPT_MISSING.format(index=index))

        negative_prompt = config.get("negative_prompt")
        if negative_prompt is not None and not isinstance(negative_prompt, str):
            errors.append(ErrorMessage.NEGATIVE_PROMPT_NOT_STRING.format(index=index))

        params = config.get("params")
        if params is not None and not isinstance(params, dict):
            errors.append(ErrorMessage.PARAMS_NOT_OBJECT.format(index=index))

    if errors:
        raise ConfigValidationException(errors)

    return [
        PromptRequest(
            prompt=config["prompt"],
            negative_prompt=config.get("negative_prompt") or "",
            params=config.get("params") or {},
        )
        for config in prompts_config
    ]


def load_prompts(file_path: Union[str, Path]) -> List[PromptRequest]:
    """读取并校验配置文件"""
    prompts_config = load_prompts_from_file(file_path)
    count = len(prompts_config) if isinstance(prompts_config, list) else 0
    logger.info(f"配置文件: {Path(file_path).resolve()}")
    logger.info(f"提示词数量: {count}")
    prompts = validate_prompts_config(prompts_config)
    logger.info("配置文件校验通过")
    return prompts
