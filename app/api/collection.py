"""
我的收藏API
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.schemas.common import ResponseModel
from app.services.interaction_service import InteractionService
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api", tags=["我的收藏"])


@router.get("/collection", response_model=ResponseModel)
async def get_collection(
    category: Optional[str] = Query(None, description="分类筛选，默认“全部”"),
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    我的收藏，附带可选分类
    """
    collection = await InteractionService.get_collection(db, current_user_id, category)
    return ResponseModel(code=200, data=collection)


@router.delete("/collection/{work_id}", response_model=ResponseModel)
async def remove_favorite(
    work_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    取消收藏
    """
    await InteractionService.remove_favorite(db, current_user_id, work_id)
    return ResponseModel(code=200, message="已取消收藏")
