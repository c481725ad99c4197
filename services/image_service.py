"""图片保存服务"""
import base64
import binascii
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import ujson

from config.settings import OutputConfig
from models.image import ImageFormat
from utils.exceptions import ImageSaveException
from utils.logger import logger


# 文件头签名，三者首字节互不相同，判定不会重叠
PNG_SIGNATURE = b"\x89PNG"
JPEG_SIGNATURE = b"\xff\xd8"
RIFF_SIGNATURE = b"RIFF"

PROMPT_FRAGMENT_LENGTH = 30

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\s\-_]")
_WHITESPACE = re.compile(r"\s+")


def detect_image_format(data: bytes) -> ImageFormat:
    """根据前几个字节判断图片格式（WebP 只检查 RIFF 容器头）"""
    if data.startswith(PNG_SIGNATURE):
        return ImageFormat.PNG
    if data.startswith(JPEG_SIGNATURE):
        return ImageFormat.JPEG
    if data.startswith(RIFF_SIGNATURE):
        return ImageFormat.WEBP
    return ImageFormat.UNKNOWN


def sanitize_prompt(prompt: str) -> str:
    """从提示词生成可用于文件名的片段"""
    safe = _UNSAFE_CHARS.sub("", prompt)[:PROMPT_FRAGMENT_LENGTH].strip()
    return _WHITESPACE.sub("_", safe)


def format_timestamp(now: Optional[datetime] = None) -> str:
    """YYYYMMDD_HHMMSS（UTC，秒精度）"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y%m%d_%H%M%S")


class ImageService:
    """图片保存业务服务"""

    def __init__(self, config: OutputConfig):
        self.image_dir = os.path.abspath(config.dir)
        self.image_prefix = config.image_prefix

    def build_filename(self, prompt: str, now: Optional[datetime] = None) -> str:
        """<前缀><时间戳>_<提示词片段>.png"""
        return f"{self.image_prefix}{format_timestamp(now)}_{sanitize_prompt(prompt)}.png"

    @staticmethod
    def decode_image(image_data: str) -> bytes:
        """
        解码 base64 图片数据，兼容 data URI 前缀
        :raises ImageSaveException: 数据不是合法 base64
        """
        if image_data.startswith("data:"):
            image_data = image_data.split(",", 1)[-1]
        try:
            return base64.b64decode(image_data)
        except (binascii.Error, ValueError) as e:
            raise ImageSaveException(f"Base64 解码失败: {e}")

    async def save_image(self, image_data: str, prompt: str,
                         metadata: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """
        保存图片及同名 JSON 元数据
        :param image_data: base64 图片数据
        :param prompt: 用于生成文件名的提示词
        :param metadata: 元数据，提供时写入 <同名>.json
        :return: 图片路径，失败返回 None（只记录日志）
        """
        try:
            logger.debug(f"收到数据长度: {len(image_data)} 字符")
            image_bytes = self.decode_image(image_data)
            logger.debug(f"解码后大小: {len(image_bytes)} 字节")

            image_format = detect_image_format(image_bytes)
            if image_format is ImageFormat.UNKNOWN:
                header = " ".join(f"0x{b:02x}" for b in image_bytes[:8])
                logger.warning(f"⚠ 无法识别的图片格式，仍然保存 | 文件头: {header}")
            else:
                logger.debug(f"图片格式: {image_format.value}")

            # 先序列化，元数据不合法时不留下任何文件
            metadata_text = None
            if metadata is not None:
                metadata_text = ujson.dumps(metadata, indent=2, ensure_ascii=False, escape_forward_slashes=False)
        except ImageSaveException as e:
            logger.error(f"图片保存失败: {e.message}")
            return None
        except (TypeError, ValueError, OverflowError) as e:
            logger.error(f"图片保存失败，元数据无法序列化: {e}")
            return None

        filepath = os.path.join(self.image_dir, self.build_filename(prompt))
        metadata_path = os.path.splitext(filepath)[0] + ".json"
        try:
            os.makedirs(self.image_dir, exist_ok=True)
            with open(filepath, 'wb') as f:
                f.write(image_bytes)

            if metadata_text is not None:
                with open(metadata_path, 'w', encoding='utf-8') as f:
                    f.write(metadata_text)
                logger.debug(f"元数据已保存: {metadata_path}")
        except OSError as e:
            logger.error(f"图片保存失败: {e}")
            self._remove_partial(filepath, metadata_path)
            return None

        logger.info(f"✓ 图片已保存: {filepath}")
        return filepath

    @staticmethod
    def _remove_partial(*paths: str) -> None:
        """删除写了一半的图片/元数据，保证图片与元数据成对存在"""
        for path in paths:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"清理残留文件失败: {path} | {e}")
