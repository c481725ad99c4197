#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
使用内置示例提示词生成图片
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from config.settings import GlobalSettings, settings as default_settings
from models.prompt import PromptRequest
from services.batch_service import BatchService
from utils.logger import logger, logging_manager


SAMPLE_PROMPTS = [
    PromptRequest(
        prompt="a beautiful landscape with mountains and a lake, sunset, digital art",
        negative_prompt="blurry, low quality, distorted",
        params={"steps": 25, "cfg_scale": 8, "width": 768, "height": 512},
    ),
    PromptRequest(
        prompt="cute cat sitting on a windowsill, soft lighting, photography",
        negative_prompt="blurry, low quality",
        params={"steps": 20, "cfg_scale": 7, "width": 512, "height": 512},
    ),
    PromptRequest(
        prompt="futuristic city skyline at night, neon lights, cyberpunk style",
        negative_prompt="blurry, low quality, distorted",
        params={"steps": 30, "cfg_scale": 9, "width": 768, "height": 512, "sampler_name": "Euler a"},
    ),
]


async def generate_samples(batch: BatchService, list_models: bool = False):
    if list_models:
        await batch.list_available_models()
    return await batch.run_batch(SAMPLE_PROMPTS)


def main(argv: Optional[List[str]] = None, config: Optional[GlobalSettings] = None) -> int:
    config = config or default_settings
    parser = argparse.ArgumentParser(prog="generate-images", description="使用内置示例提示词生成图片")
    parser.add_argument("--list-models", action="store_true", help="生成前列出可用模型")
    parser.add_argument("--verbose", action="store_true", help="输出详细日志")
    args = parser.parse_args(argv)

    logging_manager.configure(config.logger, level="DEBUG" if args.verbose else None)

    try:
        result = asyncio.run(generate_samples(BatchService(config), args.list_models))
    except Exception as e:
        logger.error(f"批处理出错: {e}")
        return 1

    return 1 if result.aborted else 0


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
