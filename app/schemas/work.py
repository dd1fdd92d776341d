"""
作品Schema模型
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import datetime


class CreatorBrief(BaseModel):
    """作品中嵌入的创作者信息"""
    id: int
    username: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None


class WorkListItem(BaseModel):
    """作品列表项"""
    id: int
    title: str
    description: Optional[str] = None
    category: str
    coverImage: str
    price: Optional[float] = None
    likesCount: int = 0
    creatorId: int
    createdAt: datetime
    creator: Optional[CreatorBrief] = None


class WorkDetail(WorkListItem):
    """作品详情"""
    images: List[str] = []
    isFavorited: bool = False
    hasLiked: bool = False


class WorkCreate(BaseModel):
    """发布作品请求模型（字段校验在服务层完成，便于返回中文提示）"""
    title: str = ""
    description: str = ""
    category: str = ""
    price: Optional[Union[str, float]] = Field(None, description="价格，为空表示免费")
    coverImage: str = ""
    images: List[str] = Field(default_factory=list, description="画廊图片链接")


class ReviewCreate(BaseModel):
    """提交评价请求模型"""
    rating: int = 5
    comment: str = ""


class ReviewResponse(BaseModel):
    """评价响应模型"""
    id: int
    workId: int
    userId: int
    rating: int
    comment: str
    createdAt: datetime
    reviewer: Optional[CreatorBrief] = None


class LikeToggle(BaseModel):
    """点赞切换请求，hasLiked 为客户端当前看到的状态"""
    hasLiked: Optional[bool] = None


class FavoriteToggle(BaseModel):
    """收藏切换请求，isFavorited 为客户端当前看到的状态"""
    isFavorited: Optional[bool] = None


class LikeState(BaseModel):
    hasLiked: bool
    likesCount: int


class FavoriteState(BaseModel):
    isFavorited: bool


class FavoriteItem(BaseModel):
    """收藏列表项"""
    id: int
    workId: int
    createdAt: datetime
    work: WorkListItem


class CollectionResponse(BaseModel):
    """我的收藏响应模型"""
    favorites: List[FavoriteItem]
    categories: List[str]
    selectedCategory: str
