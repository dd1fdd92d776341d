"""
测试作品浏览、发布与管理
"""
import pytest
from sqlalchemy import select

from app.core.errors import CraftHubError, ErrorKind
from app.models import Creator
from app.schemas.work import ReviewCreate, WorkCreate
from app.services.work_service import WorkService, parse_price, validate_work_form


def make_form(**fields) -> WorkCreate:
    data = {
        "title": "青瓷茶杯",
        "description": "手工拉坯，釉下彩",
        "category": "陶艺",
        "price": "128",
        "coverImage": "https://images.example.com/cup.jpg",
        "images": ["https://images.example.com/cup-2.jpg", ""],
    }
    data.update(fields)
    return WorkCreate(**data)


async def works_count(db, creator_id: int) -> int:
    result = await db.execute(select(Creator.works_count).where(Creator.id == creator_id))
    return result.scalar_one()


def test_valid_form_has_no_errors():
    assert validate_work_form(make_form()) == {}
    assert validate_work_form(make_form(price="")) == {}


@pytest.mark.parametrize("fields, field", [
    ({"title": ""}, "title"),
    ({"title": "杯"}, "title"),
    ({"title": "杯" * 61}, "title"),
    ({"description": "字" * 501}, "description"),
    ({"category": ""}, "category"),
    ({"category": "雕塑"}, "category"),
    ({"price": "abc"}, "price"),
    ({"price": "-1"}, "price"),
    ({"price": "1000000"}, "price"),
    ({"price": "nan"}, "price"),
    ({"coverImage": ""}, "coverImage"),
    ({"coverImage": "ftp://images.example.com/cup.jpg"}, "coverImage"),
    ({"images": ["https://ok.example.com/a.jpg", "not a url"]}, "images"),
])
def test_invalid_form_fields(fields, field):
    errors = validate_work_form(make_form(**fields))
    assert field in errors


def test_gallery_error_names_position():
    errors = validate_work_form(make_form(images=["https://ok.example.com/a.jpg", "bad"]))
    assert "第 2 个" in errors["images"]


def test_parse_price():
    assert parse_price(None) is None
    assert parse_price("  ") is None
    assert parse_price("99.5") == 99.5
    with pytest.raises(ValueError):
        parse_price("abc")


@pytest.mark.asyncio
async def test_publish_increments_works_count(db, make_creator):
    creator = await make_creator("potter")

    item = await WorkService.publish_work(db, creator.id, make_form())

    assert item.title == "青瓷茶杯"
    assert item.likesCount == 0
    assert item.price == 128.0
    assert item.creator.username == "potter"
    assert await works_count(db, creator.id) == 1

    detail = await WorkService.get_work_detail(db, item.id, creator.id)
    assert detail.images == ["https://images.example.com/cup-2.jpg"]
    assert detail.isFavorited is False
    assert detail.hasLiked is False


@pytest.mark.asyncio
async def test_publish_rejects_invalid_form(db, make_creator):
    creator = await make_creator("potter")

    with pytest.raises(CraftHubError) as exc_info:
        await WorkService.publish_work(db, creator.id, make_form(title="", category="雕塑"))

    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert set(exc_info.value.fields) == {"title", "category"}
    assert await works_count(db, creator.id) == 0


@pytest.mark.asyncio
async def test_list_works_filters_by_category(db, make_creator, make_work):
    creator = await make_creator("potter", avatar="https://images.example.com/avatar.jpg")
    cup = await make_work(creator.id, "青瓷茶杯", "陶艺")
    stool = await make_work(creator.id, "胡桃木小凳", "木工")

    everything = await WorkService.list_works(db, "全部")
    assert [work.id for work in everything] == [stool.id, cup.id]
    assert everything[0].creator.avatar == "https://images.example.com/avatar.jpg"

    pottery = await WorkService.list_works(db, "陶艺")
    assert [work.id for work in pottery] == [cup.id]


@pytest.mark.asyncio
async def test_delete_only_own_work(db, make_creator, make_work):
    owner = await make_creator("potter", works_count=1)
    other = await make_creator("carver")
    work = await make_work(owner.id)

    with pytest.raises(CraftHubError) as exc_info:
        await WorkService.delete_my_work(db, other.id, work.id)
    assert exc_info.value.kind is ErrorKind.NOT_FOUND

    await WorkService.delete_my_work(db, owner.id, work.id)
    assert await WorkService.list_my_works(db, owner.id) == []
    assert await works_count(db, owner.id) == 0

    with pytest.raises(CraftHubError):
        await WorkService.get_work(db, work.id)


@pytest.mark.asyncio
async def test_reviews(db, make_creator, make_work):
    creator = await make_creator("potter")
    buyer = await make_creator("buyer")
    work = await make_work(creator.id)

    review = await WorkService.add_review(db, work.id, buyer.id, ReviewCreate(rating=4, comment=" 很好看 "))
    assert review.comment == "很好看"
    assert review.reviewer.username == "buyer"

    reviews = await WorkService.list_reviews(db, work.id)
    assert [r.id for r in reviews] == [review.id]

    with pytest.raises(CraftHubError) as exc_info:
        await WorkService.add_review(db, work.id, buyer.id, ReviewCreate(rating=6))
    assert exc_info.value.kind is ErrorKind.VALIDATION
