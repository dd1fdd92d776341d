"""
图片地址优化与预加载
"""
import asyncio
import logging
from typing import Iterable, Optional, Set
from urllib.parse import urlencode, urlparse

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

PRIORITY_HIGH = "high"
PRIORITY_LOW = "low"


def default_storage_hosts() -> Set[str]:
    """对象存储的域名：OSS 默认域名后缀以及配置的自定义域名"""
    hosts = {"aliyuncs.com"}
    if settings.OSS_CUSTOM_DOMAIN:
        custom = settings.OSS_CUSTOM_DOMAIN
        hosts.add(urlparse(custom).netloc or custom.strip("/"))
    return hosts


def is_storage_url(url: str, storage_hosts: Optional[Iterable[str]] = None) -> bool:
    host = urlparse(url).netloc.lower()
    if not host:
        return False
    for storage_host in storage_hosts or default_storage_hosts():
        storage_host = storage_host.lower()
        if host == storage_host or host.endswith("." + storage_host):
            return True
    return False


def optimize_image_url(
    url: str,
    width: Optional[int] = None,
    quality: int = 80,
    storage_hosts: Optional[Iterable[str]] = None
) -> str:
    """
    为第三方图片地址追加尺寸和质量参数

    已带查询参数或属于对象存储的地址原样返回，因此对结果再次调用不会重复追加。

    Args:
        url: 原始图片地址
        width: 目标宽度（像素）
        quality: 压缩质量
        storage_hosts: 对象存储域名，默认取配置

    Returns:
        str: 优化后的地址
    """
    if not url:
        return url
    if is_storage_url(url, storage_hosts):
        return url
    if "?" in url:
        return url

    params = []
    if width:
        params.append(("w", width))
    if quality:
        params.append(("q", quality))

    return f"{url}?{urlencode(params)}" if params else url


class ImagePreloader:
    """
    图片预加载器

    高优先级立即请求，低优先级延迟 idle_delay 秒后再请求，避免与首屏图片抢带宽。
    不限制并发、不重试；失败时调用方保留占位图。
    """

    def __init__(self, http: httpx.AsyncClient, idle_delay: float = settings.PRELOAD_IDLE_DELAY_SECONDS):
        self.http = http
        self.idle_delay = idle_delay
        self.loaded: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()

    async def preload(self, url: str, priority: str = PRIORITY_LOW) -> None:
        """加载图片，完成后记录到 loaded；请求失败时抛出异常"""
        if url in self.loaded:
            return
        if priority != PRIORITY_HIGH:
            await asyncio.sleep(self.idle_delay)
        response = await self.http.get(url)
        response.raise_for_status()
        self.loaded.add(url)

    def schedule(self, url: str, priority: str = PRIORITY_LOW) -> Optional[asyncio.Task]:
        """后台预加载，不等待结果"""
        if not url or url in self.loaded:
            return None
        task = asyncio.create_task(self.preload(url, priority))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug(f"图片预加载失败: {exc}")

    async def wait(self) -> None:
        """等待当前所有后台预加载结束"""
        while self._tasks:
            pending = list(self._tasks)
            await asyncio.gather(*pending, return_exceptions=True)
            self._tasks.difference_update(pending)

    def is_loaded(self, url: str) -> bool:
        return url in self.loaded
