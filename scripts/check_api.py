#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Stable Diffusion WebUI API 连接测试
"""
import argparse
import asyncio
import sys
from datetime import datetime, timezone
from typing import List, Optional

from adapters.webui.client import WebUIAdapter
from config.settings import GlobalSettings, settings as default_settings
from services.image_service import ImageService
from utils.logger import logger, logging_manager


TEST_PROMPT = "a simple red circle on white background, minimal, clean"
TEST_PARAMS = {"steps": 10, "width": 256, "height": 256, "cfg_scale": 5}

TROUBLESHOOTING = [
    "1. 确认 Stable Diffusion WebUI 已启动",
    "2. 确认 WebUI 启动时带有 --api 参数",
    "3. 检查防火墙设置",
    "4. 确认 .env 中的 WEBUI_URL 正确",
]


async def check_connection(api: WebUIAdapter, config: GlobalSettings) -> bool:
    """检查连接及各接口响应"""
    logger.info("=== Stable Diffusion WebUI API 连接测试 ===")
    logger.info(f"- WebUI URL: {config.webui.url}")
    logger.info(f"- API Endpoint: {config.webui.api_endpoint}")
    logger.info(f"- 输出目录: {config.output.dir}")

    if not await api.check_status():
        logger.error("❌ API 连接: 失败")
        logger.info("排查步骤:")
        for line in TROUBLESHOOTING:
            logger.info(line)
        return False

    logger.info("✅ API 连接: 成功")

    options = await api.get_options()
    if options is not None:
        logger.info(f"📊 设置项数量: {len(options)}")

    models = await api.get_available_models()
    logger.info(f"🎨 可用模型数: {len(models)}")
    if models:
        logger.info(f"📝 第一个模型: {models[0].get('model_name') or 'Unknown'}")

    samplers = await api.get_samplers()
    logger.info(f"🔧 可用采样器数: {len(samplers)}")
    return True


async def check_generation(api: WebUIAdapter, image_service: ImageService) -> bool:
    """生成一张小测试图并保存"""
    logger.info("=== 简单生成测试 ===")
    result = await api.generate_image(TEST_PROMPT, "", TEST_PARAMS)
    if not result or not result.get("images"):
        logger.error("❌ 测试图片生成: 失败")
        return False
    logger.info("✅ 测试图片生成: 成功")

    metadata = {
        "prompt": TEST_PROMPT,
        "parameters": TEST_PARAMS,
        "test": True,
        "generation_time": datetime.now(timezone.utc).isoformat(),
    }
    saved_path = await image_service.save_image(result["images"][0], "test_image", metadata)
    if not saved_path:
        logger.error("❌ 图片保存: 失败")
        return False

    logger.info(f"✅ 图片保存: 成功 ({saved_path})")
    return True


def ask_generation() -> bool:
    if not sys.stdin.isatty():
        return False
    answer = input("是否执行生成测试？ (y/N): ")
    return answer.strip().lower() == "y"


async def run_checks(config: GlobalSettings, generate: Optional[bool]) -> int:
    api = WebUIAdapter(config.webui)
    if not await check_connection(api, config):
        return 1

    if generate is None:
        generate = ask_generation()
    if not generate:
        logger.info("已跳过生成测试")
        return 0

    ok = await check_generation(api, ImageService(config.output))
    return 0 if ok else 1


def main(argv: Optional[List[str]] = None, config: Optional[GlobalSettings] = None) -> int:
    config = config or default_settings
    parser = argparse.ArgumentParser(prog="check-api", description="WebUI API 连接测试")
    parser.add_argument("--generate", action="store_true", help="不询问，直接执行生成测试")
    parser.add_argument("--no-generate", dest="generate", action="store_false", help="不执行生成测试")
    parser.add_argument("--verbose", action="store_true", help="输出详细日志")
    parser.set_defaults(generate=None)
    args = parser.parse_args(argv)

    logging_manager.configure(config.logger, level="DEBUG" if args.verbose else None)

    try:
        return asyncio.run(run_checks(config, args.generate))
    except Exception as e:
        logger.error(f"测试执行出错: {e}")
        return 1


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
