"""
认证工具函数
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Header
from app.core.config import settings
from app.core.errors import CraftHubError, ErrorKind

# 密码加盐哈希（pbkdf2_sha256 为纯 Python 实现，无需额外系统依赖）
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """生成密码哈希"""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """校验密码，哈希格式无法识别时视为不匹配"""
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    创建JWT访问token

    Args:
        data: 要编码到token中的数据
        expires_delta: token过期时间增量，默认使用配置中的时间

    Returns:
        str: JWT token字符串
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def verify_token(token: str) -> Dict[str, Any]:
    """
    验证JWT token

    Raises:
        CraftHubError: token无效或已过期
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise CraftHubError(ErrorKind.UNAUTHORIZED, "登录已过期，请重新登录")


async def get_current_user_id(authorization: Optional[str] = Header(None)) -> int:
    """
    从请求头获取当前用户ID（通过JWT token）

    Args:
        authorization: Authorization请求头，格式为 "Bearer {token}"

    Returns:
        int: 用户ID

    Raises:
        CraftHubError: 未登录、格式错误或token无效
    """
    if not authorization or not authorization.strip():
        raise CraftHubError(ErrorKind.UNAUTHORIZED)

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise CraftHubError(ErrorKind.UNAUTHORIZED, "认证格式错误，应为: Bearer {token}")

    payload = verify_token(parts[1])
    user_id = payload.get("sub")
    if user_id is None:
        raise CraftHubError(ErrorKind.UNAUTHORIZED, "Token中未找到用户ID")

    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise CraftHubError(ErrorKind.UNAUTHORIZED, "Token中的用户ID无效")
