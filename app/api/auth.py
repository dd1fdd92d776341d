"""
登录注册API
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.schemas.auth import SignupRequest, LoginRequest, LoginResponse
from app.schemas.common import ResponseModel
from app.services.auth_service import AuthService, to_session_user
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api", tags=["登录注册"])


@router.post("/auth/signup", response_model=ResponseModel)
async def signup(
    request: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    邮箱注册

    注册成功后不会自动登录，客户端需要引导用户登录。
    """
    creator = await AuthService.signup(db, request.email, request.password, request.username)
    return ResponseModel(
        code=200,
        message="注册成功！请使用您的邮箱和密码登录",
        data=to_session_user(creator)
    )


@router.post("/auth/login", response_model=ResponseModel)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    邮箱密码登录，返回会话用户和访问token
    """
    creator, access_token = await AuthService.login(db, request.email, request.password)
    return ResponseModel(
        code=200,
        message="登录成功",
        data=LoginResponse(user=to_session_user(creator), accessToken=access_token)
    )


@router.get("/me", response_model=ResponseModel)
async def get_me(
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    当前登录用户信息
    """
    session_user = await AuthService.get_session_user(db, current_user_id)
    return ResponseModel(code=200, data=session_user)
