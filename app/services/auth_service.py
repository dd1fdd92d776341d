"""
认证服务
"""
import logging
import time
from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from app.core.config import settings
from app.core.errors import CraftHubError, ErrorKind
from app.models.creator import Creator
from app.schemas.auth import SessionUser
from app.utils.auth import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)


def _username_suffix() -> str:
    """用户名冲突时追加的后缀（毫秒时间戳）"""
    return str(int(time.time() * 1000))


def to_session_user(creator: Creator) -> SessionUser:
    return SessionUser(
        id=creator.id,
        email=creator.email,
        username=creator.username,
        avatar=creator.avatar,
        bio=creator.bio
    )


class AuthService:
    """认证服务类"""

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or "").strip().lower()

    @classmethod
    async def get_by_email(cls, db: AsyncSession, email: str) -> Optional[Creator]:
        result = await db.execute(
            select(Creator).where(Creator.email == cls.normalize_email(email))
        )
        return result.scalar_one_or_none()

    @classmethod
    async def signup(
        cls,
        db: AsyncSession,
        email: str,
        password: str,
        username: Optional[str] = None
    ) -> Creator:
        """
        注册新创作者

        步骤：
        1. 校验邮箱和密码
        2. 查询邮箱是否已注册，已注册直接拒绝（不插入任何数据）
        3. 插入创作者；用户名冲突时追加时间戳后缀重试，最多尝试
           SIGNUP_USERNAME_ATTEMPTS 次

        注册成功不会自动登录。

        Raises:
            CraftHubError: VALIDATION / EMAIL_TAKEN / USERNAME_TAKEN
        """
        email = cls.normalize_email(email)
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise CraftHubError(ErrorKind.VALIDATION, "邮箱格式不正确，请检查后重试")
        if len(password or "") < settings.PASSWORD_MIN_LENGTH:
            raise CraftHubError(ErrorKind.VALIDATION, f"密码长度至少为{settings.PASSWORD_MIN_LENGTH}位")

        if await cls.get_by_email(db, email):
            raise CraftHubError(ErrorKind.EMAIL_TAKEN)

        base_username = (username or "").strip() or email.split("@")[0]
        candidate = base_username
        password_hash = hash_password(password)

        for attempt in range(1, settings.SIGNUP_USERNAME_ATTEMPTS + 1):
            creator = Creator(
                username=candidate,
                email=email,
                password_hash=password_hash,
                followers_count=0,
                works_count=0
            )
            db.add(creator)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                logger.warning(f"注册冲突（第{attempt}次）username={candidate}: {e.orig}")
                # 并发注册同一邮箱时，冲突来自邮箱而不是用户名
                if await cls.get_by_email(db, email):
                    raise CraftHubError(ErrorKind.EMAIL_TAKEN)
                candidate = f"{base_username}_{_username_suffix()}"
                continue

            await db.refresh(creator)
            logger.info(f"注册成功，用户ID: {creator.id}")
            return creator

        raise CraftHubError(ErrorKind.USERNAME_TAKEN)

    @classmethod
    async def login(cls, db: AsyncSession, email: str, password: str) -> Tuple[Creator, str]:
        """
        邮箱密码登录

        Returns:
            (Creator, access_token)

        Raises:
            CraftHubError: USER_NOT_FOUND / WRONG_PASSWORD
        """
        creator = await cls.get_by_email(db, email)
        if not creator:
            raise CraftHubError(ErrorKind.USER_NOT_FOUND)

        if not verify_password(password or "", creator.password_hash):
            raise CraftHubError(ErrorKind.WRONG_PASSWORD)

        token = create_access_token({"sub": str(creator.id)})
        logger.info(f"登录成功，用户ID: {creator.id}")
        return creator, token

    @classmethod
    async def get_session_user(cls, db: AsyncSession, user_id: int) -> SessionUser:
        creator = await db.get(Creator, user_id)
        if not creator:
            raise CraftHubError(ErrorKind.UNAUTHORIZED, "用户不存在，请重新登录")
        return to_session_user(creator)
