"""
互动服务：点赞、收藏、关注与我的收藏
"""
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, desc
from sqlalchemy.exc import IntegrityError
from app.core.errors import CraftHubError, ErrorKind
from app.models import Creator, Work, Favorite, Like, Follow, ALL_CATEGORIES
from app.schemas.work import LikeState, FavoriteState, FavoriteItem, CollectionResponse
from app.schemas.creator import FollowState
from app.services.work_service import WorkService, build_work_item, adjust_counter

logger = logging.getLogger(__name__)


def filter_favorites_by_category(favorites: List[FavoriteItem], category: Optional[str]) -> List[FavoriteItem]:
    """按作品分类过滤收藏，"全部" 或空值返回全部"""
    if not category or category == ALL_CATEGORIES:
        return list(favorites)
    return [favorite for favorite in favorites if favorite.work.category == category]


def collection_categories(favorites: List[FavoriteItem]) -> List[str]:
    """收藏中出现过的分类，按出现顺序去重，首项为 "全部" """
    categories = [ALL_CATEGORIES]
    for favorite in favorites:
        category = favorite.work.category
        if category and category not in categories:
            categories.append(category)
    return categories


class InteractionService:
    """
    互动服务类

    每次切换分两步且不在同一事务中：先写入 / 删除关联行，再单独更新计数。
    切换方向以调用方传入的当前状态为准，未传入时先查询一次。
    """

    @staticmethod
    async def _has_row(db: AsyncSession, model, user_id: int, work_id: int) -> bool:
        result = await db.execute(
            select(model.id).where(and_(model.user_id == user_id, model.work_id == work_id))
        )
        return result.first() is not None

    @classmethod
    async def toggle_like(
        cls,
        db: AsyncSession,
        user_id: int,
        work_id: int,
        has_liked: Optional[bool] = None
    ) -> LikeState:
        """
        点赞 / 取消点赞

        Args:
            has_liked: 客户端当前显示的点赞状态

        Returns:
            LikeState: 切换后的状态和点赞数
        """
        work = await WorkService.get_work(db, work_id)
        if has_liked is None:
            has_liked = await cls._has_row(db, Like, user_id, work_id)

        if has_liked:
            result = await db.execute(
                delete(Like).where(and_(Like.user_id == user_id, Like.work_id == work_id))
            )
            await db.commit()
            removed = result.rowcount > 0
            likes_count = None
            if removed:
                likes_count = await adjust_counter(db, Work, Work.likes_count, work_id, -1)
            liked = False
        else:
            db.add(Like(user_id=user_id, work_id=work_id))
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise CraftHubError(ErrorKind.ALREADY_LIKED)
            likes_count = await adjust_counter(db, Work, Work.likes_count, work_id, 1)
            liked = True

        if likes_count is None:
            await db.refresh(work)
            likes_count = max(work.likes_count or 0, 0)

        return LikeState(hasLiked=liked, likesCount=likes_count)

    @classmethod
    async def toggle_favorite(
        cls,
        db: AsyncSession,
        user_id: int,
        work_id: int,
        is_favorited: Optional[bool] = None
    ) -> FavoriteState:
        """收藏 / 取消收藏"""
        await WorkService.get_work(db, work_id)
        if is_favorited is None:
            is_favorited = await cls._has_row(db, Favorite, user_id, work_id)

        if is_favorited:
            await db.execute(
                delete(Favorite).where(and_(Favorite.user_id == user_id, Favorite.work_id == work_id))
            )
            await db.commit()
            return FavoriteState(isFavorited=False)

        db.add(Favorite(user_id=user_id, work_id=work_id))
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise CraftHubError(ErrorKind.ALREADY_FAVORITED)
        return FavoriteState(isFavorited=True)

    @staticmethod
    async def is_following(db: AsyncSession, follower_id: int, following_id: int) -> bool:
        result = await db.execute(
            select(Follow.id).where(
                and_(Follow.follower_id == follower_id, Follow.following_id == following_id)
            )
        )
        return result.first() is not None

    @classmethod
    async def toggle_follow(
        cls,
        db: AsyncSession,
        follower_id: int,
        following_id: int,
        is_following: Optional[bool] = None
    ) -> FollowState:
        """
        关注 / 取消关注，并更新被关注者的 followers_count
        """
        if follower_id == following_id:
            raise CraftHubError(ErrorKind.CANNOT_FOLLOW_SELF)

        target = await db.get(Creator, following_id)
        if not target:
            raise CraftHubError(ErrorKind.NOT_FOUND, "创作者不存在")

        if is_following is None:
            is_following = await cls.is_following(db, follower_id, following_id)

        followers_count = None
        if is_following:
            result = await db.execute(
                delete(Follow).where(
                    and_(Follow.follower_id == follower_id, Follow.following_id == following_id)
                )
            )
            await db.commit()
            if result.rowcount > 0:
                followers_count = await adjust_counter(db, Creator, Creator.followers_count, following_id, -1)
            following = False
        else:
            db.add(Follow(follower_id=follower_id, following_id=following_id))
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise CraftHubError(ErrorKind.ALREADY_FOLLOWING)
            followers_count = await adjust_counter(db, Creator, Creator.followers_count, following_id, 1)
            following = True

        if followers_count is None:
            await db.refresh(target)
            followers_count = max(target.followers_count or 0, 0)

        return FollowState(isFollowing=following, followersCount=followers_count)

    @staticmethod
    async def list_favorites(db: AsyncSession, user_id: int) -> List[FavoriteItem]:
        """当前用户的全部收藏，按收藏时间倒序"""
        result = await db.execute(
            select(Favorite, Work, Creator.username)
            .join(Work, Work.id == Favorite.work_id)
            .outerjoin(Creator, Creator.id == Work.creator_id)
            .where(Favorite.user_id == user_id)
            .order_by(desc(Favorite.created_at), desc(Favorite.id))
        )
        return [
            FavoriteItem(
                id=favorite.id,
                workId=favorite.work_id,
                createdAt=favorite.created_at,
                work=build_work_item(work, username)
            )
            for favorite, work, username in result.all()
        ]

    @classmethod
    async def get_collection(cls, db: AsyncSession, user_id: int, category: Optional[str] = None) -> CollectionResponse:
        """我的收藏，分类按钮基于未过滤的数据计算"""
        favorites = await cls.list_favorites(db, user_id)
        selected = category or ALL_CATEGORIES
        return CollectionResponse(
            favorites=filter_favorites_by_category(favorites, selected),
            categories=collection_categories(favorites),
            selectedCategory=selected
        )

    @staticmethod
    async def remove_favorite(db: AsyncSession, user_id: int, work_id: int) -> None:
        await db.execute(
            delete(Favorite).where(and_(Favorite.user_id == user_id, Favorite.work_id == work_id))
        )
        await db.commit()
