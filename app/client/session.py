"""
客户端会话与路由守卫
"""
import json
import logging
import re
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import ValidationError

from app.schemas.auth import SessionUser

logger = logging.getLogger(__name__)

USER_KEY = "user"
TOKEN_KEY = "access_token"

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/"

# 页面路由，除登录页外都需要登录
ROUTES = [
    "/login",
    "/",
    "/work/:id",
    "/creator/:id",
    "/collection",
    "/publish",
    "/profile",
    "/workshops",
    "/my-workshops",
    "/my-works",
]
PROTECTED_ROUTES = [route for route in ROUTES if route != LOGIN_ROUTE]


def _compile(route: str) -> re.Pattern:
    pattern = re.sub(r":\w+", r"[^/]+", route)
    return re.compile(f"^{pattern}/?$" if route != HOME_ROUTE else "^/$")


_PROTECTED_PATTERNS = [_compile(route) for route in PROTECTED_ROUTES]


def is_protected(path: str) -> bool:
    path = path.split("?", 1)[0] or HOME_ROUTE
    return any(pattern.match(path) for pattern in _PROTECTED_PATTERNS)


def resolve_route(path: str, authenticated: bool) -> str:
    """
    路由守卫

    未登录访问受保护页面 -> /login；已登录访问 /login -> /；其余原样返回。
    """
    if not authenticated and is_protected(path):
        return LOGIN_ROUTE
    if authenticated and path.rstrip("/") == LOGIN_ROUTE:
        return HOME_ROUTE
    return path


class FileStorage:
    """
    以 JSON 文件保存的字符串键值存储

    文件损坏时按空存储处理。
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"会话存储读取失败，已忽略: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class SessionHolder:
    """
    当前登录用户

    每次修改 user 都同步写入存储：有值覆盖，为空删除。
    """

    def __init__(self, storage: FileStorage):
        self.storage = storage
        self.user: Optional[SessionUser] = None
        self.access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def restore(self) -> Optional[SessionUser]:
        """从存储恢复会话，数据无法解析时丢弃并保持未登录"""
        raw = self.storage.get_item(USER_KEY)
        if raw is None:
            self.user = None
            self.access_token = None
            return None

        try:
            self.user = SessionUser.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"会话数据损坏，已清除: {e.error_count()} 个错误")
            self.clear()
            return None

        self.access_token = self.storage.get_item(TOKEN_KEY)
        return self.user

    def set_user(self, user: Optional[SessionUser], access_token: Optional[str] = None) -> None:
        """
        更新当前用户

        Args:
            user: 为空时等同于退出登录
            access_token: 为空时保留原有 token（例如修改资料）
        """
        if user is None:
            self.clear()
            return

        self.user = user
        self.storage.set_item(USER_KEY, user.model_dump_json())
        if access_token is not None:
            self.access_token = access_token
            self.storage.set_item(TOKEN_KEY, access_token)

    def clear(self) -> None:
        self.user = None
        self.access_token = None
        self.storage.remove_item(USER_KEY)
        self.storage.remove_item(TOKEN_KEY)

    def resolve_route(self, path: str) -> str:
        return resolve_route(path, self.is_authenticated)
