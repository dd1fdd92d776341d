"""
登录注册Schema模型
"""
from pydantic import BaseModel, Field
from typing import Optional


class SignupRequest(BaseModel):
    """注册请求模型"""
    email: str = Field(..., description="邮箱")
    password: str = Field(..., description="密码")
    username: Optional[str] = Field(None, description="用户名，为空时使用邮箱前缀")


class LoginRequest(BaseModel):
    """登录请求模型"""
    email: str = Field(..., description="邮箱")
    password: str = Field(..., description="密码")


class SessionUser(BaseModel):
    """会话中保存的用户信息"""
    id: int
    email: str
    username: str
    avatar: Optional[str] = None
    bio: Optional[str] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    """登录响应模型"""
    user: SessionUser
    accessToken: str
    tokenType: str = "bearer"
