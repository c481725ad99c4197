"""批量生成服务"""
import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from adapters.webui.client import WebUIAdapter
from config.settings import GlobalSettings
from models.base import ErrorMessage
from models.batch import BatchResult, FailureKind
from models.image import ImageMetadata
from models.prompt import PromptRequest
from services.image_service import ImageService
from utils.exceptions import ServiceUnreachableException
from utils.logger import logger, set_run_id


class BatchService:
    """
    按顺序执行一组提示词

    - 预检失败（WebUI 不可达）时整批中止
    - 单个提示词/单张图片失败只记录，不影响后续
    - 图片之间、提示词之间按配置固定等待
    """

    def __init__(self, config: GlobalSettings,
                 adapter: Optional[WebUIAdapter] = None,
                 image_service: Optional[ImageService] = None):
        self.config = config
        self.api = adapter or WebUIAdapter(config.webui)
        self.image_service = image_service or ImageService(config.output)

    async def list_available_models(self) -> List[Dict[str, Any]]:
        """输出可用模型列表"""
        models = await self.api.get_available_models()
        logger.info("=== 可用模型 ===")
        for index, model in enumerate(models):
            logger.info(f"{index + 1}. {model.get('title')} ({model.get('model_name')})")
        return models

    async def preflight(self) -> None:
        """
        检查 WebUI 是否可达
        :raises ServiceUnreachableException: 不可达
        """
        if not await self.api.check_status():
            raise ServiceUnreachableException(self.config.webui.url)

        logger.info("已连接 Stable Diffusion WebUI API")
        logger.info(f"输出目录: {self.image_service.image_dir}")

        current_model = await self.api.get_current_model()
        if current_model:
            logger.info(f"当前模型: {current_model}")

    async def run_batch(self, prompts: Sequence[PromptRequest],
                        cancel_event: Optional[asyncio.Event] = None) -> BatchResult:
        """
        执行批处理
        :param prompts: 已校验的提示词列表
        :param cancel_event: 取消信号，只在提示词之间检查
        :return: 本次运行的计数结果
        """
        set_run_id(uuid.uuid4().hex[:8])
        result = BatchResult(output_dir=self.image_service.image_dir)

        try:
            await self.preflight()
        except ServiceUnreachableException as e:
            logger.error(f"错误: {ErrorMessage.SERVICE_UNAVAILABLE}")
            logger.error(f"URL: {e.details['url']}")
            logger.error(ErrorMessage.SERVICE_HINT)
            result.aborted = True
            result.record_failure(FailureKind.SERVICE_UNREACHABLE, e.message)
            self.report(result)
            set_run_id(None)
            return result

        total = len(prompts)
        for i, request in enumerate(prompts):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("已取消，跳过剩余提示词")
                result.cancelled = True
                break

            logger.info(f"--- {i + 1}/{total} ---")
            await self._process_prompt(i, request, result)

            if i < total - 1 and not (cancel_event is not None and cancel_event.is_set()):
                await asyncio.sleep(self.config.batch.item_interval)

        self.report(result)
        set_run_id(None)
        return result

    async def _process_prompt(self, index: int, request: PromptRequest, result: BatchResult) -> None:
        """处理单个提示词：生成、保存全部返回的图片"""
        batch_index = index + 1

        if not request.prompt:
            logger.info("未设置提示词，跳过")
            result.skipped_prompts += 1
            return

        response = await self.api.generate_image(request.prompt, request.negative_prompt, request.params)
        images = response.get("images") if response else None
        if not images:
            logger.error(ErrorMessage.IMAGE_GENERATE_FAILED)
            result.record_failure(FailureKind.GENERATION_FAILED, ErrorMessage.IMAGE_GENERATE_FAILED,
                                  batch_index=batch_index)
            return

        for j, image_data in enumerate(images):
            image_index = j + 1
            result.total_images += 1

            # 模型可能在运行中被外部切换，每张图片重新获取
            current_model = await self.api.get_current_model()
            metadata = ImageMetadata(
                prompt=request.prompt,
                negative_prompt=request.negative_prompt,
                parameters=request.params,
                model=current_model,
                generation_time=datetime.now(timezone.utc).isoformat(),
                batch_index=batch_index,
                image_index=image_index,
            )

            saved_path = await self.image_service.save_image(image_data, request.prompt, metadata.model_dump())
            if saved_path:
                result.successful_images += 1
                result.saved_paths.append(saved_path)
            else:
                result.record_failure(FailureKind.IMAGE_SAVE_FAILED, ErrorMessage.IMAGE_SAVE_FAILED,
                                      batch_index=batch_index, image_index=image_index)

            if j < len(images) - 1:
                await asyncio.sleep(self.config.batch.image_interval)

    def report(self, result: BatchResult) -> None:
        """输出汇总（无论成功与否都会执行）"""
        logger.info("=== 批处理完成 ===")
        logger.info(f"总生成数: {result.total_images}")
        logger.info(f"成功数: {result.successful_images}")
        if result.failures:
            logger.info(f"失败: {len(result.failures)} 项")
        logger.info(f"输出目录: {result.output_dir}")
