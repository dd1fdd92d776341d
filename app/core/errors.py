"""
错误类型与本地化提示
"""
from enum import Enum
from typing import Dict, Optional

from fastapi import status
from sqlalchemy.exc import DBAPIError, IntegrityError, NoResultFound, OperationalError


class ErrorKind(str, Enum):
    """业务错误类型"""
    NETWORK = "network"
    SCHEMA_MISSING = "schema_missing"
    PERMISSION_DENIED = "permission_denied"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    EMAIL_TAKEN = "email_taken"
    USERNAME_TAKEN = "username_taken"
    ALREADY_FAVORITED = "already_favorited"
    ALREADY_LIKED = "already_liked"
    ALREADY_FOLLOWING = "already_following"
    ALREADY_REGISTERED = "already_registered"
    CANNOT_FOLLOW_SELF = "cannot_follow_self"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    USER_NOT_FOUND = "user_not_found"
    WRONG_PASSWORD = "wrong_password"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    CONFLICT = "conflict"
    UNKNOWN = "unknown"


ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "网络连接失败，请检查网络后重试",
    ErrorKind.SCHEMA_MISSING: "数据库表未创建，请先执行数据库初始化脚本",
    ErrorKind.PERMISSION_DENIED: "上传失败：权限不足，请检查存储桶的访问策略",
    ErrorKind.STORAGE_UNAVAILABLE: "存储桶 \"works\" 不存在或无法访问",
    ErrorKind.EMAIL_TAKEN: "该邮箱已被注册，请直接登录",
    ErrorKind.USERNAME_TAKEN: "用户名已被占用，请更换后重试",
    ErrorKind.ALREADY_FAVORITED: "已经收藏过该作品",
    ErrorKind.ALREADY_LIKED: "已经点赞过该作品",
    ErrorKind.ALREADY_FOLLOWING: "已经关注过该创作者",
    ErrorKind.ALREADY_REGISTERED: "您已经报名过这个活动了",
    ErrorKind.CANNOT_FOLLOW_SELF: "不能关注自己",
    ErrorKind.VALIDATION: "提交的信息不完整或格式不正确",
    ErrorKind.NOT_FOUND: "内容不存在或已被删除",
    ErrorKind.USER_NOT_FOUND: "该邮箱未注册，请先注册",
    ErrorKind.WRONG_PASSWORD: "密码错误，请重试",
    ErrorKind.UNAUTHORIZED: "请先登录",
    ErrorKind.RATE_LIMITED: "请求过于频繁，请稍后再试",
    ErrorKind.CONFLICT: "数据已存在，请勿重复提交",
    ErrorKind.UNKNOWN: "操作失败，请重试",
}

ERROR_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.NETWORK: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.SCHEMA_MISSING: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.STORAGE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.EMAIL_TAKEN: status.HTTP_409_CONFLICT,
    ErrorKind.USERNAME_TAKEN: status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_FAVORITED: status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_LIKED: status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_FOLLOWING: status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorKind.CANNOT_FOLLOW_SELF: status.HTTP_400_BAD_REQUEST,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.WRONG_PASSWORD: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class CraftHubError(Exception):
    """
    业务异常

    Args:
        kind: 错误类型
        detail: 自定义提示，为空时使用错误类型对应的默认提示
        fields: 表单字段级错误 {字段名: 提示}
    """

    def __init__(self, kind: ErrorKind, detail: Optional[str] = None, fields: Optional[Dict[str, str]] = None):
        self.kind = kind
        self.detail = detail
        self.fields = fields or {}
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return self.detail or ERROR_MESSAGES[self.kind]

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.kind]


# 没有携带错误类型时按关键字匹配（顺序即优先级）
_KEYWORD_RULES = [
    (("does not exist", "relation", "no such table"), ErrorKind.SCHEMA_MISSING),
    (("network", "fetch", "connection refused", "timed out"), ErrorKind.NETWORK),
    (("rate limit", "too many requests"), ErrorKind.RATE_LIMITED),
    (("already registered", "already exists"), ErrorKind.EMAIL_TAKEN),
    (("user not found", "no user found"), ErrorKind.USER_NOT_FOUND),
    (("permission", "policy", "unauthorized", "403"), ErrorKind.PERMISSION_DENIED),
]


def translate_error_message(message: Optional[str]) -> ErrorKind:
    """
    将原始错误文本归类为错误类型，无法识别时返回 UNKNOWN
    """
    text = (message or "").lower()
    if "invalid" in text and "email" in text:
        return ErrorKind.VALIDATION
    for keywords, kind in _KEYWORD_RULES:
        if any(keyword in text for keyword in keywords):
            return kind
    return ErrorKind.UNKNOWN


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def classify_db_error(exc: Exception) -> ErrorKind:
    """
    将数据库异常归类为错误类型

    23505 唯一约束冲突 -> CONFLICT，42P01 表不存在 -> SCHEMA_MISSING
    """
    if isinstance(exc, NoResultFound):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, IntegrityError):
        return ErrorKind.CONFLICT
    if isinstance(exc, DBAPIError):
        code = _sqlstate(exc)
        if code == "23505":
            return ErrorKind.CONFLICT
        if code == "42P01":
            return ErrorKind.SCHEMA_MISSING
        kind = translate_error_message(str(exc.orig))
        if kind is ErrorKind.SCHEMA_MISSING:
            return kind
        if isinstance(exc, OperationalError) or exc.connection_invalidated:
            return ErrorKind.NETWORK
        return kind
    return ErrorKind.UNKNOWN
