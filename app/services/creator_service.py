"""
创作者服务：创作者主页、个人资料、粉丝与关注
"""
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from sqlalchemy.exc import IntegrityError
from app.core.errors import CraftHubError, ErrorKind
from app.models import Creator, CreatorProfile, Follow
from app.schemas.auth import SessionUser
from app.schemas.creator import (
    CreatorResponse, CreatorSummary, CreatorStudioResponse, ProfileUpdate,
    ExtendedProfileUpdate, ExtendedProfileResponse, ProfileResponse
)
from app.services.auth_service import to_session_user
from app.services.interaction_service import InteractionService
from app.services.work_service import WorkService

logger = logging.getLogger(__name__)

USERNAME_MAX_LENGTH = 32


def build_creator(creator: Creator) -> CreatorResponse:
    return CreatorResponse(
        id=creator.id,
        username=creator.username,
        avatar=creator.avatar,
        bio=creator.bio,
        followersCount=creator.followers_count or 0,
        worksCount=creator.works_count or 0,
        createdAt=creator.created_at
    )


def build_extended_profile(profile: Optional[CreatorProfile]) -> ExtendedProfileResponse:
    if not profile:
        return ExtendedProfileResponse()
    return ExtendedProfileResponse(
        bannerImage=profile.banner_image,
        location=profile.location,
        website=profile.website,
        instagram=profile.instagram,
        wechat=profile.wechat,
        specialties=list(profile.specialties or [])
    )


def parse_specialties(value: Optional[str]) -> List[str]:
    """逗号分隔（中英文逗号均可）的擅长领域"""
    if not value:
        return []
    normalized = value.replace("，", ",")
    return [item.strip() for item in normalized.split(",") if item.strip()]


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class CreatorService:
    """创作者服务类"""

    @staticmethod
    async def get_creator(db: AsyncSession, creator_id: int) -> Creator:
        creator = await db.get(Creator, creator_id)
        if not creator:
            raise CraftHubError(ErrorKind.NOT_FOUND, "创作者不存在")
        return creator

    @classmethod
    async def get_studio(cls, db: AsyncSession, creator_id: int, viewer_id: int) -> CreatorStudioResponse:
        """创作者主页：资料、作品和当前用户是否已关注"""
        creator = await cls.get_creator(db, creator_id)
        works = await WorkService.list_my_works(db, creator_id)
        for work in works:
            work.creator.username = creator.username
            work.creator.avatar = creator.avatar

        is_following = False
        if viewer_id != creator_id:
            is_following = await InteractionService.is_following(db, viewer_id, creator_id)

        return CreatorStudioResponse(creator=build_creator(creator), works=works, isFollowing=is_following)

    @staticmethod
    async def get_extended_profile(db: AsyncSession, creator_id: int) -> Optional[CreatorProfile]:
        result = await db.execute(select(CreatorProfile).where(CreatorProfile.creator_id == creator_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def following_count(db: AsyncSession, user_id: int) -> int:
        result = await db.execute(select(func.count(Follow.id)).where(Follow.follower_id == user_id))
        return result.scalar_one() or 0

    @classmethod
    async def get_profile(cls, db: AsyncSession, user_id: int) -> ProfileResponse:
        """个人中心数据"""
        creator = await cls.get_creator(db, user_id)
        profile = await cls.get_extended_profile(db, user_id)
        works = await WorkService.list_my_works(db, user_id)

        return ProfileResponse(
            creator=build_creator(creator),
            email=creator.email,
            profile=build_extended_profile(profile),
            works=works,
            followingCount=await cls.following_count(db, user_id),
            totalLikes=sum(work.likesCount for work in works)
        )

    @classmethod
    async def update_basic(cls, db: AsyncSession, user_id: int, data: ProfileUpdate) -> SessionUser:
        """
        更新基本信息

        Returns:
            SessionUser: 更新后的会话用户信息，客户端用它覆盖本地会话
        """
        username = (data.username or "").strip()
        if not username:
            raise CraftHubError(ErrorKind.VALIDATION, "用户名不能为空", {"username": "用户名不能为空"})
        if len(username) > USERNAME_MAX_LENGTH:
            message = f"用户名不能超过{USERNAME_MAX_LENGTH}个字符"
            raise CraftHubError(ErrorKind.VALIDATION, message, {"username": message})

        creator = await cls.get_creator(db, user_id)
        creator.username = username
        creator.avatar = _clean(data.avatar)
        creator.bio = (data.bio or "").strip()
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise CraftHubError(ErrorKind.USERNAME_TAKEN)

        await db.refresh(creator)
        logger.info(f"基本信息已更新: user_id={user_id}")
        return to_session_user(creator)

    @classmethod
    async def save_extended_profile(
        cls,
        db: AsyncSession,
        user_id: int,
        data: ExtendedProfileUpdate
    ) -> ExtendedProfileResponse:
        """保存扩展资料，不存在时创建"""
        await cls.get_creator(db, user_id)
        profile = await cls.get_extended_profile(db, user_id)
        if not profile:
            profile = CreatorProfile(creator_id=user_id)
            db.add(profile)

        profile.banner_image = _clean(data.bannerImage)
        profile.location = _clean(data.location)
        profile.website = _clean(data.website)
        profile.instagram = _clean(data.instagram)
        profile.wechat = _clean(data.wechat)
        profile.specialties = parse_specialties(data.specialties)

        await db.commit()
        await db.refresh(profile)
        return build_extended_profile(profile)

    @classmethod
    async def list_followers(cls, db: AsyncSession, creator_id: int) -> List[CreatorSummary]:
        """粉丝列表，按关注时间倒序"""
        await cls.get_creator(db, creator_id)
        result = await db.execute(
            select(Creator)
            .join(Follow, Follow.follower_id == Creator.id)
            .where(Follow.following_id == creator_id)
            .order_by(desc(Follow.created_at), desc(Follow.id))
        )
        return [cls._summary(creator) for creator in result.scalars().all()]

    @classmethod
    async def list_following(cls, db: AsyncSession, creator_id: int) -> List[CreatorSummary]:
        """关注列表，按关注时间倒序"""
        await cls.get_creator(db, creator_id)
        result = await db.execute(
            select(Creator)
            .join(Follow, Follow.following_id == Creator.id)
            .where(Follow.follower_id == creator_id)
            .order_by(desc(Follow.created_at), desc(Follow.id))
        )
        return [cls._summary(creator) for creator in result.scalars().all()]

    @staticmethod
    def _summary(creator: Creator) -> CreatorSummary:
        return CreatorSummary(id=creator.id, username=creator.username, avatar=creator.avatar, bio=creator.bio)
