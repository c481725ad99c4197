#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
从外部配置文件读取提示词并批量生成图片
"""
import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional

from config.settings import GlobalSettings, settings as default_settings
from models.base import ErrorMessage
from models.batch import BatchResult
from models.prompt import PromptRequest
from services.batch_service import BatchService
from services.prompt_service import load_prompts
from utils.exceptions import BusinessException, ConfigValidationException
from utils.logger import logger, logging_manager


def build_parser(config: GlobalSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="batch-generate", description="从外部配置文件批量生成图片")
    parser.add_argument("config_file", nargs="?", default="prompts.json", help="提示词配置文件 (默认: prompts.json)")
    parser.add_argument("--validate-only", action="store_true", help="只校验配置文件")
    parser.add_argument("--verbose", action="store_true", help="输出详细日志")
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.app.version}")
    return parser


def make_cancel_handler(loop: asyncio.AbstractEventLoop, cancel_event: asyncio.Event):
    """
    第一次 Ctrl+C：请求取消，当前请求完成后停止
    处理器随即卸载，再次 Ctrl+C 恢复默认的 KeyboardInterrupt 立即退出
    """
    def handler():
        logger.warning("收到取消请求，当前请求完成后停止（再次按 Ctrl+C 强制退出）")
        cancel_event.set()
        loop.remove_signal_handler(signal.SIGINT)
    return handler


async def run_with_cancellation(batch: BatchService, prompts: List[PromptRequest]) -> BatchResult:
    """执行批处理，Ctrl+C 时在提示词之间取消"""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, make_cancel_handler(loop, cancel_event))
    except (NotImplementedError, RuntimeError):
        # Windows 事件循环不支持 add_signal_handler
        pass
    try:
        return await batch.run_batch(prompts, cancel_event)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def main(argv: Optional[List[str]] = None, config: Optional[GlobalSettings] = None) -> int:
    config = config or default_settings
    args = build_parser(config).parse_args(argv)

    logging_manager.configure(config.logger, level="DEBUG" if args.verbose else None)

    config_path = Path(args.config_file).resolve()

    try:
        prompts = load_prompts(config_path)
    except ConfigValidationException as e:
        logger.error(f"错误: {ErrorMessage.CONFIG_VALIDATION_ERROR}")
        for error in e.errors:
            logger.error(f"  - {error}")
        return 1
    except BusinessException as e:
        logger.error(f"错误: {e.message}")
        return 1

    if args.validate_only:
        logger.info("仅校验完成")
        return 0

    try:
        batch = BatchService(config)
        result = asyncio.run(run_with_cancellation(batch, prompts))
    except Exception as e:
        if args.verbose:
            logger.exception(f"批处理出错: {e}")
        else:
            logger.error(f"批处理出错: {e}")
        return 1

    return 1 if result.aborted else 0


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
