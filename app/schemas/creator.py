"""
创作者与个人资料Schema模型
"""
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from app.schemas.work import WorkListItem


class CreatorResponse(BaseModel):
    """创作者信息"""
    id: int
    username: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    followersCount: int = 0
    worksCount: int = 0
    createdAt: datetime


class CreatorSummary(BaseModel):
    """粉丝 / 关注列表项"""
    id: int
    username: str
    avatar: Optional[str] = None
    bio: Optional[str] = None


class CreatorStudioResponse(BaseModel):
    """创作者主页"""
    creator: CreatorResponse
    works: List[WorkListItem]
    isFollowing: bool = False


class FollowToggle(BaseModel):
    """关注切换请求，isFollowing 为客户端当前看到的状态"""
    isFollowing: Optional[bool] = None


class FollowState(BaseModel):
    isFollowing: bool
    followersCount: int


class ProfileUpdate(BaseModel):
    """基本信息更新请求"""
    username: str = ""
    avatar: Optional[str] = None
    bio: Optional[str] = None


class ExtendedProfileUpdate(BaseModel):
    """扩展资料更新请求，specialties 为逗号分隔的字符串"""
    bannerImage: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    instagram: Optional[str] = None
    wechat: Optional[str] = None
    specialties: Optional[str] = None


class ExtendedProfileResponse(BaseModel):
    bannerImage: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    instagram: Optional[str] = None
    wechat: Optional[str] = None
    specialties: List[str] = []


class ProfileResponse(BaseModel):
    """个人中心"""
    creator: CreatorResponse
    email: str
    profile: ExtendedProfileResponse
    works: List[WorkListItem]
    followingCount: int = 0
    totalLikes: int = 0
