"""
作品服务：浏览、详情、评价、发布与管理
"""
import logging
from typing import Dict, List, Optional
from urllib.parse import urlparse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, case, desc
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import settings
from app.core.errors import CraftHubError, ErrorKind, classify_db_error
from app.models import Creator, Work, Review, Favorite, Like, WORK_CATEGORIES, ALL_CATEGORIES
from app.schemas.work import (
    CreatorBrief, WorkListItem, WorkDetail, WorkCreate, ReviewCreate, ReviewResponse
)

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 2
TITLE_MAX_LENGTH = 60
DESCRIPTION_MAX_LENGTH = 500
PRICE_MAX = 999999


def build_work_item(
    work: Work,
    username: Optional[str] = None,
    avatar: Optional[str] = None,
    bio: Optional[str] = None
) -> WorkListItem:
    """将作品行和创作者字段组装为列表项"""
    return WorkListItem(
        id=work.id,
        title=work.title,
        description=work.description,
        category=work.category,
        coverImage=work.cover_image,
        price=float(work.price) if work.price is not None else None,
        likesCount=work.likes_count or 0,
        creatorId=work.creator_id,
        createdAt=work.created_at,
        creator=CreatorBrief(id=work.creator_id, username=username, avatar=avatar, bio=bio)
    )


def is_valid_url(url: str) -> bool:
    """只接受 http / https 链接"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_work_form(form: WorkCreate) -> Dict[str, str]:
    """
    校验发布表单

    Returns:
        Dict[str, str]: 字段名 -> 错误提示，为空表示通过
    """
    errors: Dict[str, str] = {}

    title = (form.title or "").strip()
    if not title:
        errors["title"] = "标题不能为空"
    elif len(title) < TITLE_MIN_LENGTH:
        errors["title"] = f"标题至少需要{TITLE_MIN_LENGTH}个字符"
    elif len(title) > TITLE_MAX_LENGTH:
        errors["title"] = f"标题不能超过{TITLE_MAX_LENGTH}个字符"

    if len((form.description or "").strip()) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"描述不能超过{DESCRIPTION_MAX_LENGTH}个字符"

    if not form.category:
        errors["category"] = "请选择作品分类"
    elif form.category not in WORK_CATEGORIES:
        errors["category"] = "作品分类不存在"

    try:
        price = parse_price(form.price)
    except ValueError:
        errors["price"] = "价格必须为有效数字"
    else:
        if price is not None and price < 0:
            errors["price"] = "价格不能为负数"
        elif price is not None and price > PRICE_MAX:
            errors["price"] = f"价格不能超过{PRICE_MAX}"

    cover = (form.coverImage or "").strip()
    if not cover:
        errors["coverImage"] = "请上传封面图片或输入图片链接"
    elif not is_valid_url(cover):
        errors["coverImage"] = "请输入有效的图片链接（以 http:// 或 https:// 开头）"

    gallery = [url.strip() for url in form.images if url and url.strip()]
    for index, url in enumerate(gallery, start=1):
        if not is_valid_url(url):
            errors["images"] = f"第 {index} 个图片链接格式不正确，请使用 http:// 或 https:// 开头的有效链接"
            break

    return errors


def parse_price(value) -> Optional[float]:
    """空值表示免费；非数字抛出 ValueError"""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    price = float(value)
    if price != price:  # NaN
        raise ValueError("price is NaN")
    return price


class WorkService:
    """作品服务类"""

    @staticmethod
    async def list_works(
        db: AsyncSession,
        category: Optional[str] = None,
        limit: int = settings.LIST_LIMIT
    ) -> List[WorkListItem]:
        """
        首页作品列表，按发布时间倒序

        Args:
            category: 分类，None 或 "全部" 表示不过滤
        """
        stmt = (
            select(Work, Creator.username, Creator.avatar)
            .outerjoin(Creator, Creator.id == Work.creator_id)
            .order_by(desc(Work.created_at), desc(Work.id))
            .limit(limit)
        )
        if category and category != ALL_CATEGORIES:
            stmt = stmt.where(Work.category == category)

        result = await db.execute(stmt)
        return [build_work_item(work, username, avatar) for work, username, avatar in result.all()]

    @staticmethod
    async def get_work(db: AsyncSession, work_id: int) -> Work:
        work = await db.get(Work, work_id)
        if not work:
            raise CraftHubError(ErrorKind.NOT_FOUND, "作品不存在或已被删除")
        return work

    @classmethod
    async def get_work_detail(cls, db: AsyncSession, work_id: int, user_id: int) -> WorkDetail:
        """作品详情，附带当前用户的收藏 / 点赞状态"""
        result = await db.execute(
            select(Work, Creator.username, Creator.avatar, Creator.bio)
            .outerjoin(Creator, Creator.id == Work.creator_id)
            .where(Work.id == work_id)
        )
        row = result.first()
        if not row:
            raise CraftHubError(ErrorKind.NOT_FOUND, "作品不存在或已被删除")

        work, username, avatar, bio = row
        item = build_work_item(work, username, avatar, bio)

        is_favorited = await cls._exists(db, Favorite, user_id, work_id)
        has_liked = await cls._exists(db, Like, user_id, work_id)

        return WorkDetail(
            **item.model_dump(),
            images=list(work.images or []),
            isFavorited=is_favorited,
            hasLiked=has_liked
        )

    @staticmethod
    async def _exists(db: AsyncSession, model, user_id: int, work_id: int) -> bool:
        result = await db.execute(
            select(model.id).where(and_(model.user_id == user_id, model.work_id == work_id))
        )
        return result.first() is not None

    @staticmethod
    async def list_reviews(db: AsyncSession, work_id: int) -> List[ReviewResponse]:
        """作品评价，按时间倒序"""
        result = await db.execute(
            select(Review, Creator.username, Creator.avatar)
            .outerjoin(Creator, Creator.id == Review.user_id)
            .where(Review.work_id == work_id)
            .order_by(desc(Review.created_at), desc(Review.id))
        )
        return [
            ReviewResponse(
                id=review.id,
                workId=review.work_id,
                userId=review.user_id,
                rating=review.rating,
                comment=review.comment or "",
                createdAt=review.created_at,
                reviewer=CreatorBrief(id=review.user_id, username=username, avatar=avatar)
            )
            for review, username, avatar in result.all()
        ]

    @classmethod
    async def add_review(cls, db: AsyncSession, work_id: int, user_id: int, data: ReviewCreate) -> ReviewResponse:
        """提交评价（只追加，不支持修改）"""
        if data.rating < 1 or data.rating > 5:
            raise CraftHubError(ErrorKind.VALIDATION, "评分必须在1到5之间", {"rating": "评分必须在1到5之间"})

        await cls.get_work(db, work_id)

        review = Review(work_id=work_id, user_id=user_id, rating=data.rating, comment=(data.comment or "").strip())
        db.add(review)
        await db.commit()
        await db.refresh(review)

        creator = await db.get(Creator, user_id)
        return ReviewResponse(
            id=review.id,
            workId=review.work_id,
            userId=review.user_id,
            rating=review.rating,
            comment=review.comment,
            createdAt=review.created_at,
            reviewer=CreatorBrief(
                id=user_id,
                username=creator.username if creator else None,
                avatar=creator.avatar if creator else None
            )
        )

    @staticmethod
    async def publish_work(db: AsyncSession, user_id: int, form: WorkCreate) -> WorkListItem:
        """
        发布作品

        先插入作品，再单独更新创作者的 works_count；计数更新失败只记录日志。
        """
        errors = validate_work_form(form)
        if errors:
            first_message = next(iter(errors.values()))
            raise CraftHubError(ErrorKind.VALIDATION, first_message, errors)

        work = Work(
            title=form.title.strip(),
            description=(form.description or "").strip(),
            category=form.category,
            cover_image=form.coverImage.strip(),
            images=[url.strip() for url in form.images if url and url.strip()],
            price=parse_price(form.price),
            likes_count=0,
            creator_id=user_id
        )
        db.add(work)
        await db.commit()
        await db.refresh(work)
        logger.info(f"作品发布成功: work_id={work.id}, creator_id={user_id}")

        await adjust_counter(db, Creator, Creator.works_count, user_id, 1)

        creator = await db.get(Creator, user_id)
        return build_work_item(work, creator.username if creator else None, creator.avatar if creator else None)

    @staticmethod
    async def list_my_works(db: AsyncSession, user_id: int, limit: Optional[int] = None) -> List[WorkListItem]:
        """当前用户的作品，按发布时间倒序"""
        stmt = (
            select(Work)
            .where(Work.creator_id == user_id)
            .order_by(desc(Work.created_at), desc(Work.id))
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return [build_work_item(work) for work in result.scalars().all()]

    @staticmethod
    async def delete_my_work(db: AsyncSession, user_id: int, work_id: int) -> None:
        """删除自己的作品"""
        result = await db.execute(
            delete(Work).where(and_(Work.id == work_id, Work.creator_id == user_id))
        )
        if result.rowcount == 0:
            raise CraftHubError(ErrorKind.NOT_FOUND, "作品不存在或无权删除")
        await db.commit()
        logger.info(f"作品已删除: work_id={work_id}, creator_id={user_id}")

        await adjust_counter(db, Creator, Creator.works_count, user_id, -1)


async def adjust_counter(db: AsyncSession, model, column, row_id: int, delta: int) -> Optional[int]:
    """
    在数据库端增减计数，最小为0

    与关联行的写入分开提交：失败时只记录警告，不回滚已完成的写入。

    Returns:
        Optional[int]: 更新后的计数，失败时返回 None
    """
    if delta >= 0:
        new_value = column + delta
    else:
        new_value = case((column + delta > 0, column + delta), else_=0)

    try:
        await db.execute(update(model).where(model.id == row_id).values({column.key: new_value}))
        await db.commit()
        result = await db.execute(select(column).where(model.id == row_id))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(f"计数更新失败 {model.__tablename__}.{column.key} id={row_id}: {classify_db_error(e).value} {e}")
        return None
