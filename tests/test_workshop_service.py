"""
测试工作坊报名
"""
import pytest

from app.core.errors import CraftHubError, ErrorKind
from app.schemas.workshop import RegistrationCreate
from app.services.workshop_service import WorkshopService


def make_form(**fields) -> RegistrationCreate:
    data = {"name": "张三", "phone": "13800000000", "email": " ", "notes": "带一位朋友"}
    data.update(fields)
    return RegistrationCreate(**data)


@pytest.mark.asyncio
async def test_list_workshops_by_date(db, make_workshop):
    later = await make_workshop("木工入门", days=14)
    sooner = await make_workshop("陶艺体验", days=3)

    workshops = await WorkshopService.list_workshops(db)

    assert [w.id for w in workshops] == [sooner.id, later.id]


@pytest.mark.asyncio
async def test_register_and_list(db, make_creator, make_workshop):
    user = await make_creator("student")
    workshop = await make_workshop()

    registration = await WorkshopService.register(db, user.id, workshop.id, make_form())

    assert registration.email is None
    assert registration.notes == "带一位朋友"
    assert registration.workshop.title == workshop.title

    registrations = await WorkshopService.list_registrations(db, user.id)
    assert [r.id for r in registrations] == [registration.id]


@pytest.mark.asyncio
async def test_duplicate_registration_is_rejected(db, make_creator, make_workshop):
    user = await make_creator("student")
    workshop = await make_workshop()
    await WorkshopService.register(db, user.id, workshop.id, make_form())

    with pytest.raises(CraftHubError) as exc_info:
        await WorkshopService.register(db, user.id, workshop.id, make_form(name="李四"))

    assert exc_info.value.kind is ErrorKind.ALREADY_REGISTERED
    assert exc_info.value.message == "您已经报名过这个活动了"
    assert len(await WorkshopService.list_registrations(db, user.id)) == 1


@pytest.mark.asyncio
async def test_register_requires_name_and_phone(db, make_creator, make_workshop):
    user = await make_creator("student")
    workshop = await make_workshop()

    with pytest.raises(CraftHubError) as exc_info:
        await WorkshopService.register(db, user.id, workshop.id, make_form(name=" ", phone=""))

    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert set(exc_info.value.fields) == {"name", "phone"}


@pytest.mark.asyncio
async def test_register_missing_workshop(db, make_creator):
    user = await make_creator("student")

    with pytest.raises(CraftHubError) as exc_info:
        await WorkshopService.register(db, user.id, 404, make_form())

    assert exc_info.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_cancel_only_own_registration(db, make_creator, make_workshop):
    user = await make_creator("student")
    other = await make_creator("other")
    workshop = await make_workshop()
    registration = await WorkshopService.register(db, user.id, workshop.id, make_form())

    with pytest.raises(CraftHubError) as exc_info:
        await WorkshopService.cancel_registration(db, other.id, registration.id)
    assert exc_info.value.kind is ErrorKind.NOT_FOUND

    await WorkshopService.cancel_registration(db, user.id, registration.id)
    assert await WorkshopService.list_registrations(db, user.id) == []

    # 取消后可以重新报名
    again = await WorkshopService.register(db, user.id, workshop.id, make_form())
    assert again.workshopId == workshop.id
