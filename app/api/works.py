"""
作品API：浏览、详情、评价、点赞收藏、发布与管理
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.schemas.common import ResponseModel
from app.schemas.work import WorkCreate, ReviewCreate, LikeToggle, FavoriteToggle
from app.services.interaction_service import InteractionService
from app.services.work_service import WorkService
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api", tags=["作品"])


@router.get("/works", response_model=ResponseModel)
async def list_works(
    category: Optional[str] = Query(None, description="分类，不传或为“全部”时返回所有作品"),
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    首页作品列表
    """
    works = await WorkService.list_works(db, category)
    return ResponseModel(code=200, data=works)


@router.get("/works/{work_id}", response_model=ResponseModel)
async def get_work(
    work_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    作品详情
    """
    detail = await WorkService.get_work_detail(db, work_id, current_user_id)
    return ResponseModel(code=200, data=detail)


@router.get("/works/{work_id}/reviews", response_model=ResponseModel)
async def list_reviews(
    work_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    作品评价列表
    """
    reviews = await WorkService.list_reviews(db, work_id)
    return ResponseModel(code=200, data=reviews)


@router.post("/works/{work_id}/reviews", response_model=ResponseModel)
async def add_review(
    work_id: int,
    review_data: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    提交评价
    """
    review = await WorkService.add_review(db, work_id, current_user_id, review_data)
    return ResponseModel(code=200, message="评价提交成功", data=review)


@router.post("/works/{work_id}/like", response_model=ResponseModel)
async def toggle_like(
    work_id: int,
    toggle: Optional[LikeToggle] = None,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    点赞 / 取消点赞
    """
    has_liked = toggle.hasLiked if toggle else None
    state = await InteractionService.toggle_like(db, current_user_id, work_id, has_liked)
    return ResponseModel(code=200, message="已点赞" if state.hasLiked else "已取消点赞", data=state)


@router.post("/works/{work_id}/favorite", response_model=ResponseModel)
async def toggle_favorite(
    work_id: int,
    toggle: Optional[FavoriteToggle] = None,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    收藏 / 取消收藏
    """
    is_favorited = toggle.isFavorited if toggle else None
    state = await InteractionService.toggle_favorite(db, current_user_id, work_id, is_favorited)
    return ResponseModel(code=200, message="已收藏" if state.isFavorited else "已取消收藏", data=state)


@router.post("/works", response_model=ResponseModel)
async def publish_work(
    work_data: WorkCreate,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    发布作品
    """
    work = await WorkService.publish_work(db, current_user_id, work_data)
    return ResponseModel(code=200, message="作品发布成功！", data=work)


@router.get("/my-works", response_model=ResponseModel)
async def list_my_works(
    limit: Optional[int] = Query(None, ge=1, description="返回数量上限"),
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    我的作品
    """
    works = await WorkService.list_my_works(db, current_user_id, limit)
    return ResponseModel(code=200, data=works)


@router.delete("/my-works/{work_id}", response_model=ResponseModel)
async def delete_my_work(
    work_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    删除作品
    """
    await WorkService.delete_my_work(db, current_user_id, work_id)
    return ResponseModel(code=200, message="删除成功")
