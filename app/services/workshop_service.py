"""
工作坊服务：活动列表、报名与取消
"""
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, asc, desc
from sqlalchemy.exc import IntegrityError
from app.core.config import settings
from app.core.errors import CraftHubError, ErrorKind
from app.models import Workshop, WorkshopRegistration
from app.schemas.workshop import WorkshopResponse, RegistrationCreate, RegistrationResponse

logger = logging.getLogger(__name__)


def build_workshop(workshop: Workshop) -> WorkshopResponse:
    return WorkshopResponse(
        id=workshop.id,
        title=workshop.title,
        description=workshop.description,
        date=workshop.date,
        location=workshop.location,
        coverImage=workshop.cover_image,
        signupUrl=workshop.signup_url
    )


def build_registration(registration: WorkshopRegistration, workshop: Optional[Workshop] = None) -> RegistrationResponse:
    return RegistrationResponse(
        id=registration.id,
        workshopId=registration.workshop_id,
        name=registration.name,
        phone=registration.phone,
        email=registration.email,
        notes=registration.notes,
        createdAt=registration.created_at,
        workshop=build_workshop(workshop) if workshop else None
    )


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


class WorkshopService:
    """工作坊服务类"""

    @staticmethod
    async def list_workshops(db: AsyncSession, limit: int = settings.LIST_LIMIT) -> List[WorkshopResponse]:
        """活动列表，按活动时间升序"""
        result = await db.execute(
            select(Workshop).order_by(asc(Workshop.date), asc(Workshop.id)).limit(limit)
        )
        return [build_workshop(workshop) for workshop in result.scalars().all()]

    @staticmethod
    async def register(
        db: AsyncSession,
        user_id: int,
        workshop_id: int,
        data: RegistrationCreate
    ) -> RegistrationResponse:
        """
        报名活动

        插入前先查询是否已报名；并发重复提交由唯一约束兜底。

        Raises:
            CraftHubError: VALIDATION / NOT_FOUND / ALREADY_REGISTERED
        """
        name = (data.name or "").strip()
        phone = (data.phone or "").strip()
        fields = {}
        if not name:
            fields["name"] = "请填写姓名"
        if not phone:
            fields["phone"] = "请填写联系电话"
        if fields:
            raise CraftHubError(ErrorKind.VALIDATION, next(iter(fields.values())), fields)

        workshop = await db.get(Workshop, workshop_id)
        if not workshop:
            raise CraftHubError(ErrorKind.NOT_FOUND, "活动不存在或已结束")

        existing = await db.execute(
            select(WorkshopRegistration.id).where(
                and_(
                    WorkshopRegistration.user_id == user_id,
                    WorkshopRegistration.workshop_id == workshop_id
                )
            )
        )
        if existing.first() is not None:
            raise CraftHubError(ErrorKind.ALREADY_REGISTERED)

        registration = WorkshopRegistration(
            user_id=user_id,
            workshop_id=workshop_id,
            name=name,
            phone=phone,
            email=_blank_to_none(data.email),
            notes=_blank_to_none(data.notes)
        )
        db.add(registration)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise CraftHubError(ErrorKind.ALREADY_REGISTERED)

        await db.refresh(registration)
        logger.info(f"报名成功: user_id={user_id}, workshop_id={workshop_id}")
        return build_registration(registration, workshop)

    @staticmethod
    async def list_registrations(
        db: AsyncSession,
        user_id: int,
        limit: int = settings.LIST_LIMIT
    ) -> List[RegistrationResponse]:
        """我的报名，按报名时间倒序"""
        result = await db.execute(
            select(WorkshopRegistration, Workshop)
            .join(Workshop, Workshop.id == WorkshopRegistration.workshop_id)
            .where(WorkshopRegistration.user_id == user_id)
            .order_by(desc(WorkshopRegistration.created_at), desc(WorkshopRegistration.id))
            .limit(limit)
        )
        return [build_registration(registration, workshop) for registration, workshop in result.all()]

    @staticmethod
    async def cancel_registration(db: AsyncSession, user_id: int, registration_id: int) -> None:
        """取消报名，只能取消自己的报名"""
        result = await db.execute(
            delete(WorkshopRegistration).where(
                and_(
                    WorkshopRegistration.id == registration_id,
                    WorkshopRegistration.user_id == user_id
                )
            )
        )
        if result.rowcount == 0:
            raise CraftHubError(ErrorKind.NOT_FOUND, "报名记录不存在")
        await db.commit()
        logger.info(f"取消报名: registration_id={registration_id}, user_id={user_id}")
