from .webui.client import WebUIAdapter

__all__ = [
    "WebUIAdapter",
]
