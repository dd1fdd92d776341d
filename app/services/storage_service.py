"""
对象存储服务（阿里云OSS）
"""
import logging
import time
from typing import Optional

import oss2
from oss2.exceptions import AccessDenied, NoSuchBucket, RequestError, ServerError

from app.core.config import settings
from app.core.errors import CraftHubError, ErrorKind

logger = logging.getLogger(__name__)


def build_object_path(user_id: int, kind: str, filename: str, index: Optional[int] = None) -> str:
    """
    生成对象路径：{user_id}/{毫秒时间戳}_{kind}[_{index}].{ext}

    Args:
        kind: cover / gallery / avatar / banner
        filename: 原始文件名，用于取扩展名
        index: 画廊图片序号
    """
    ext = filename.rsplit(".", 1)[-1].lower() if "." in (filename or "") else "jpg"
    suffix = f"{kind}_{index}" if index is not None else kind
    return f"{user_id}/{int(time.time() * 1000)}_{suffix}.{ext}"


class StorageService:
    """图片存储，所有上传都放在同一个公开读的 bucket 中"""

    def __init__(self, bucket=None):
        self.bucket_name = settings.OSS_BUCKET
        self.endpoint = settings.OSS_ENDPOINT
        self.custom_domain = settings.OSS_CUSTOM_DOMAIN
        self._bucket = bucket

    @property
    def bucket(self):
        if self._bucket is None:
            if not settings.OSS_ACCESS_KEY or not settings.OSS_SECRET_KEY:
                raise CraftHubError(ErrorKind.STORAGE_UNAVAILABLE, "对象存储未配置访问密钥")
            auth = oss2.Auth(settings.OSS_ACCESS_KEY, settings.OSS_SECRET_KEY)
            self._bucket = oss2.Bucket(auth, f"https://{self.endpoint}", self.bucket_name)
            logger.info(f"OSS客户端初始化完成 Endpoint: {self.endpoint} Bucket: {self.bucket_name}")
        return self._bucket

    def create_bucket(self, public: bool = True) -> None:
        """创建 bucket，已存在时视为成功"""
        acl = oss2.BUCKET_ACL_PUBLIC_READ if public else oss2.BUCKET_ACL_PRIVATE
        try:
            self.bucket.create_bucket(acl)
            logger.info(f"已创建存储桶: {self.bucket_name}")
        except ServerError as e:
            if e.status == 409 or "already" in (e.code or "").lower():
                logger.info(f"存储桶已存在: {self.bucket_name}")
                return
            if isinstance(e, AccessDenied) or e.status == 403:
                raise CraftHubError(ErrorKind.PERMISSION_DENIED)
            logger.error(f"创建存储桶失败: {e}")
            raise CraftHubError(ErrorKind.STORAGE_UNAVAILABLE)
        except RequestError as e:
            logger.error(f"连接对象存储失败: {e}")
            raise CraftHubError(ErrorKind.NETWORK)

    def ensure_bucket(self) -> None:
        """
        确认 bucket 可访问，不存在时尝试创建

        权限类错误不在这里拦截，留给上传时处理。
        """
        try:
            self.bucket.get_bucket_info()
        except NoSuchBucket:
            self.create_bucket(public=True)
        except ServerError as e:
            logger.warning(f"无法验证存储桶访问权限，将直接尝试上传: {e}")
        except RequestError as e:
            logger.error(f"连接对象存储失败: {e}")
            raise CraftHubError(ErrorKind.NETWORK)

    def upload(self, path: str, data: bytes, content_type: Optional[str]) -> str:
        """
        上传图片并返回公开访问URL

        不覆盖已存在的对象。

        Raises:
            CraftHubError: VALIDATION / CONFLICT / PERMISSION_DENIED / STORAGE_UNAVAILABLE / NETWORK
        """
        if not content_type or not content_type.startswith("image/"):
            raise CraftHubError(ErrorKind.VALIDATION, "请选择图片文件（支持 JPG、PNG、GIF 等格式）")
        if len(data) > settings.UPLOAD_MAX_BYTES:
            limit_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
            raise CraftHubError(ErrorKind.VALIDATION, f"图片大小不能超过{limit_mb}MB，请选择较小的图片文件")

        try:
            if self.bucket.object_exists(path):
                raise CraftHubError(ErrorKind.CONFLICT, "同名文件已存在，请重新上传")
            self.bucket.put_object(path, data, headers={
                "Content-Type": content_type,
                "Cache-Control": settings.UPLOAD_CACHE_CONTROL
            })
        except NoSuchBucket:
            logger.error(f"上传失败，存储桶不存在: {self.bucket_name}")
            raise CraftHubError(ErrorKind.STORAGE_UNAVAILABLE)
        except ServerError as e:
            logger.error(f"上传图片失败 {path}: {e}")
            if isinstance(e, AccessDenied) or e.status == 403:
                raise CraftHubError(ErrorKind.PERMISSION_DENIED)
            raise CraftHubError(ErrorKind.UNKNOWN, f"上传失败: {e.message or e.code}")
        except RequestError as e:
            logger.error(f"连接对象存储失败: {e}")
            raise CraftHubError(ErrorKind.NETWORK)

        logger.info(f"图片上传成功: {path}")
        return self.get_public_url(path)

    def get_public_url(self, path: str) -> str:
        """获取图片的公开访问URL"""
        if self.custom_domain:
            base_url = self.custom_domain.rstrip("/")
            return f"{base_url}/{path}"
        return f"https://{self.bucket_name}.{self.endpoint}/{path}"


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """存储服务依赖，进程内共用一个实例"""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
