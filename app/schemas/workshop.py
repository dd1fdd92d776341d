"""
工作坊Schema模型
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class WorkshopResponse(BaseModel):
    """工作坊响应模型"""
    id: int
    title: str
    description: Optional[str] = None
    date: datetime
    location: Optional[str] = None
    coverImage: Optional[str] = None
    signupUrl: Optional[str] = None


class RegistrationCreate(BaseModel):
    """报名请求模型"""
    name: str = ""
    phone: str = ""
    email: Optional[str] = None
    notes: Optional[str] = None


class RegistrationResponse(BaseModel):
    """报名记录响应模型"""
    id: int
    workshopId: int
    name: str
    phone: str
    email: Optional[str] = None
    notes: Optional[str] = None
    createdAt: datetime
    workshop: Optional[WorkshopResponse] = None
