"""Stable Diffusion WebUI 适配器"""
import asyncio
import httpx
from typing import Any, Dict, List, Optional

from config.settings import WebUIConfig
from models.prompt import GenerationParams, build_generation_payload
from utils.exceptions import GenerationRequestException
from utils.logger import logger


OPTIONS_PATH = "/sdapi/v1/options"
MODELS_PATH = "/sdapi/v1/sd-models"
SAMPLERS_PATH = "/sdapi/v1/samplers"


class WebUIAdapter:
    """
    WebUI API 适配器

    所有方法都是尽力而为：网络/HTTP/JSON 错误只记录日志，
    并返回 False / None / [] 给调用方，由调用方当作“不可用”处理。
    """

    def __init__(self, config: WebUIConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.base_url = config.url.rstrip("/")
        self.api_endpoint = config.api_endpoint
        # 测试时注入 httpx.MockTransport
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )

    async def _get_json(self, path: str) -> Optional[Any]:
        """GET 并解析 JSON，失败返回 None"""
        async with self._client(self.config.status_timeout) as client:
            response = await client.get(path)
            if response.status_code != 200:
                logger.error(
                    f"[WebUI] GET {path} 失败 | "
                    f"状态码: {response.status_code} | "
                    f"响应: {response.text[:200]}"
                )
                return None
            return response.json()

    async def check_status(self) -> bool:
        """检查 API 是否可达（不重试）"""
        try:
            async with self._client(self.config.status_timeout) as client:
                response = await client.get(OPTIONS_PATH)
                return response.status_code == 200
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"[WebUI] 连接检查失败: {e}")
            return False

    async def get_options(self) -> Optional[Dict[str, Any]]:
        """获取 WebUI 设置（诊断用）"""
        try:
            return await self._get_json(OPTIONS_PATH)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"获取设置失败: {e}")
            return None

    async def get_available_models(self) -> List[Dict[str, Any]]:
        """获取模型列表"""
        try:
            models = await self._get_json(MODELS_PATH)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"获取模型列表失败: {e}")
            return []
        return models if isinstance(models, list) else []

    async def get_samplers(self) -> List[Dict[str, Any]]:
        """获取采样器列表（诊断用）"""
        try:
            samplers = await self._get_json(SAMPLERS_PATH)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"获取采样器列表失败: {e}")
            return []
        return samplers if isinstance(samplers, list) else []

    async def get_current_model(self) -> Optional[str]:
        """获取当前加载的 checkpoint"""
        try:
            options = await self._get_json(OPTIONS_PATH)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"获取当前模型失败: {e}")
            return None
        if not isinstance(options, dict):
            return None
        return options.get("sd_model_checkpoint")

    async def set_model(self, model_name: str) -> bool:
        """
        切换模型
        WebUI 异步加载权重，返回成功后调用方仍需等待 model_settle_delay
        """
        try:
            async with self._client(self.config.timeout) as client:
                response = await client.post(OPTIONS_PATH, json={"sd_model_checkpoint": model_name})
        except httpx.HTTPError as e:
            logger.error(f"切换模型失败: {e}")
            return False

        if not response.is_success:
            logger.error(
                f"切换模型失败 | "
                f"状态码: {response.status_code} | "
                f"响应: {response.text[:200]}"
            )
            return False

        logger.info(f"模型已切换: {model_name}")
        return True

    async def _post_generation(self, payload: GenerationParams) -> Dict[str, Any]:
        async with self._client(self.config.timeout) as client:
            response = await client.post(self.api_endpoint, json=payload)
            if not response.is_success:
                raise GenerationRequestException(
                    status_code=response.status_code,
                    body=response.text[:200],
                )
            return response.json()

    async def generate_image(self, prompt: str, negative_prompt: str = "",
                             custom_params: Optional[GenerationParams] = None) -> Optional[Dict[str, Any]]:
        """
        生成图片
        :param prompt: 提示词
        :param negative_prompt: 反向提示词
        :param custom_params: 覆盖默认值的参数，可包含 model 键
        :return: WebUI 返回的 JSON（{"images": [base64, ...], ...}），失败返回 None
        """
        payload, model = build_generation_payload(prompt, negative_prompt, custom_params)

        if model and model != await self.get_current_model():
            logger.info(f"正在切换模型: {model}")
            if await self.set_model(model):
                await asyncio.sleep(self.config.model_settle_delay)
            else:
                logger.warning(f"切换模型失败，使用当前模型继续生成: {model}")

        logger.debug("=== 生成参数 ===")
        logger.debug(f"提示词: {prompt[:100]}{'...' if len(prompt) > 100 else ''}")
        logger.debug(f"反向提示词: {negative_prompt[:50]}{'...' if len(negative_prompt) > 50 else ''}")
        logger.debug(
            f"步数: {payload['steps']} | "
            f"CFG: {payload['cfg_scale']} | "
            f"尺寸: {payload['width']}x{payload['height']} | "
            f"采样器: {payload['sampler_name']}"
        )

        logger.info(f"正在生成图片: {prompt[:50]}...")
        try:
            result = await self._post_generation(payload)
        except GenerationRequestException as e:
            logger.error(
                f"[WebUI] API 调用失败 | "
                f"状态码: {e.details['status_code']} | "
                f"响应: {e.details['body']}"
            )
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[WebUI] API 调用失败: {e}")
            return None

        if not isinstance(result, dict):
            logger.error(f"[WebUI] 响应格式异常: {type(result).__name__}")
            return None

        images = result.get("images")
        if images:
            logger.info(f"✓ 生成图片数: {len(images)}")
            logger.debug(f"图片数据长度: {len(images[0])} 字符")
        else:
            logger.warning("⚠ 响应中没有图片数据")

        return result
