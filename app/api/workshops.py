"""
工作坊API：活动列表、报名、我的报名
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.schemas.common import ResponseModel
from app.schemas.workshop import RegistrationCreate
from app.services.workshop_service import WorkshopService
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api", tags=["工作坊"])


@router.get("/workshops", response_model=ResponseModel)
async def list_workshops(
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    工作坊活动列表
    """
    workshops = await WorkshopService.list_workshops(db)
    return ResponseModel(code=200, data=workshops)


@router.post("/workshops/{workshop_id}/registrations", response_model=ResponseModel)
async def register_workshop(
    workshop_id: int,
    registration_data: RegistrationCreate,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    报名活动
    """
    registration = await WorkshopService.register(db, current_user_id, workshop_id, registration_data)
    return ResponseModel(code=200, message="报名成功！我们会尽快与您联系", data=registration)


@router.get("/my-workshops", response_model=ResponseModel)
async def list_my_workshops(
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    我的报名
    """
    registrations = await WorkshopService.list_registrations(db, current_user_id)
    return ResponseModel(code=200, data=registrations)


@router.delete("/my-workshops/{registration_id}", response_model=ResponseModel)
async def cancel_registration(
    registration_id: int,
    db: AsyncSession = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    取消报名
    """
    await WorkshopService.cancel_registration(db, current_user_id, registration_id)
    return ResponseModel(code=200, message="已取消报名")
