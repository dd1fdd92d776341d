"""
创作者API：创作者主页、关注、个人资料
"""
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.schemas.common import ResponseModel
from app.schemas.creator import FollowToggle, ProfileUpdate, ExtendedProfileUpdate
from app.services.creator_service import CreatorService
from app.services.interaction_service import InteractionService
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api", tags=["创作者"])


@router.get("/creators/{creator_id}", response_model=ResponseModel)
async def get_creator_studio(
    creator_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    创作者主页
    """
    studio = await CreatorService.get_studio(db, creator_id, current_user_id)
    return ResponseModel(code=200, data=studio)


@router.post("/creators/{creator_id}/follow", response_model=ResponseModel)
async def toggle_follow(
    creator_id: int,
    toggle: Optional[FollowToggle] = None,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    关注 / 取消关注
    """
    is_following = toggle.isFollowing if toggle else None
    state = await InteractionService.toggle_follow(db, current_user_id, creator_id, is_following)
    return ResponseModel(code=200, message="已关注" if state.isFollowing else "已取消关注", data=state)


@router.get("/creators/{creator_id}/followers", response_model=ResponseModel)
async def list_followers(
    creator_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    粉丝列表
    """
    followers = await CreatorService.list_followers(db, creator_id)
    return ResponseModel(code=200, data=followers)


@router.get("/creators/{creator_id}/following", response_model=ResponseModel)
async def list_following(
    creator_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    关注列表
    """
    following = await CreatorService.list_following(db, creator_id)
    return ResponseModel(code=200, data=following)


@router.get("/profile", response_model=ResponseModel)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    个人中心
    """
    profile = await CreatorService.get_profile(db, current_user_id)
    return ResponseModel(code=200, data=profile)


@router.put("/profile", response_model=ResponseModel)
async def update_profile(
    profile_data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    更新基本信息，返回新的会话用户信息
    """
    session_user = await CreatorService.update_basic(db, current_user_id, profile_data)
    return ResponseModel(code=200, message="基本信息更新成功！", data=session_user)


@router.put("/profile/extended", response_model=ResponseModel)
async def save_extended_profile(
    profile_data: ExtendedProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    保存扩展资料
    """
    profile = await CreatorService.save_extended_profile(db, current_user_id, profile_data)
    return ResponseModel(code=200, message="扩展资料保存成功！", data=profile)
