"""
测试点赞、收藏、关注与我的收藏
"""
from datetime import datetime

import pytest
from sqlalchemy import func, select

from app.core.errors import CraftHubError, ErrorKind
from app.models import Creator, Like, Work
from app.schemas.work import CreatorBrief, FavoriteItem, WorkListItem
from app.services.interaction_service import (
    InteractionService, collection_categories, filter_favorites_by_category
)


async def likes_count(db, work_id: int) -> int:
    result = await db.execute(select(Work.likes_count).where(Work.id == work_id))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_like_toggle_round_trip(db, make_creator, make_work):
    creator = await make_creator("potter")
    fan = await make_creator("fan")
    work = await make_work(creator.id, likes_count=5)

    state = await InteractionService.toggle_like(db, fan.id, work.id, has_liked=False)
    assert state.hasLiked is True
    assert state.likesCount == 6

    state = await InteractionService.toggle_like(db, fan.id, work.id, has_liked=True)
    assert state.hasLiked is False
    assert state.likesCount == 5
    assert await likes_count(db, work.id) == 5


@pytest.mark.asyncio
async def test_like_count_never_negative(db, make_creator, make_work):
    creator = await make_creator("potter")
    fan = await make_creator("fan")
    work = await make_work(creator.id, likes_count=0)
    db.add(Like(user_id=fan.id, work_id=work.id))
    await db.commit()

    state = await InteractionService.toggle_like(db, fan.id, work.id, has_liked=True)

    assert state.likesCount == 0
    assert await likes_count(db, work.id) == 0


@pytest.mark.asyncio
async def test_unlike_without_row_keeps_count(db, make_creator, make_work):
    """本地状态过期时取消点赞不会多减一次"""
    creator = await make_creator("potter")
    fan = await make_creator("fan")
    work = await make_work(creator.id, likes_count=3)

    state = await InteractionService.toggle_like(db, fan.id, work.id, has_liked=True)

    assert state.hasLiked is False
    assert state.likesCount == 3


@pytest.mark.asyncio
async def test_duplicate_like_is_rejected(db, make_creator, make_work):
    creator = await make_creator("potter")
    fan = await make_creator("fan")
    work = await make_work(creator.id, likes_count=0)
    await InteractionService.toggle_like(db, fan.id, work.id, has_liked=False)

    with pytest.raises(CraftHubError) as exc_info:
        await InteractionService.toggle_like(db, fan.id, work.id, has_liked=False)

    assert exc_info.value.kind is ErrorKind.ALREADY_LIKED
    assert await likes_count(db, work.id) == 1


@pytest.mark.asyncio
async def test_like_direction_probed_when_state_missing(db, make_creator, make_work):
    creator = await make_creator("potter")
    fan = await make_creator("fan")
    work = await make_work(creator.id, likes_count=0)

    first = await InteractionService.toggle_like(db, fan.id, work.id)
    second = await InteractionService.toggle_like(db, fan.id, work.id)

    assert (first.hasLiked, first.likesCount) == (True, 1)
    assert (second.hasLiked, second.likesCount) == (False, 0)


@pytest.mark.asyncio
async def test_like_missing_work(db, make_creator):
    fan = await make_creator("fan")

    with pytest.raises(CraftHubError) as exc_info:
        await InteractionService.toggle_like(db, fan.id, 999, has_liked=False)

    assert exc_info.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_favorite_toggle_and_duplicate(db, make_creator, make_work):
    creator = await make_creator("potter")
    fan = await make_creator("fan")
    work = await make_work(creator.id)

    state = await InteractionService.toggle_favorite(db, fan.id, work.id, is_favorited=False)
    assert state.isFavorited is True

    with pytest.raises(CraftHubError) as exc_info:
        await InteractionService.toggle_favorite(db, fan.id, work.id, is_favorited=False)
    assert exc_info.value.kind is ErrorKind.ALREADY_FAVORITED

    state = await InteractionService.toggle_favorite(db, fan.id, work.id, is_favorited=True)
    assert state.isFavorited is False


@pytest.mark.asyncio
async def test_follow_toggle_updates_followers_count(db, make_creator):
    creator = await make_creator("potter")
    fan = await make_creator("fan")

    state = await InteractionService.toggle_follow(db, fan.id, creator.id, is_following=False)
    assert (state.isFollowing, state.followersCount) == (True, 1)
    assert await InteractionService.is_following(db, fan.id, creator.id)

    state = await InteractionService.toggle_follow(db, fan.id, creator.id, is_following=True)
    assert (state.isFollowing, state.followersCount) == (False, 0)

    result = await db.execute(select(Creator.followers_count).where(Creator.id == creator.id))
    assert result.scalar_one() == 0


@pytest.mark.asyncio
async def test_cannot_follow_self(db, make_creator):
    creator = await make_creator("potter")

    with pytest.raises(CraftHubError) as exc_info:
        await InteractionService.toggle_follow(db, creator.id, creator.id)

    assert exc_info.value.kind is ErrorKind.CANNOT_FOLLOW_SELF


@pytest.mark.asyncio
async def test_duplicate_follow_is_rejected(db, make_creator):
    creator = await make_creator("potter")
    fan = await make_creator("fan")
    await InteractionService.toggle_follow(db, fan.id, creator.id, is_following=False)

    with pytest.raises(CraftHubError) as exc_info:
        await InteractionService.toggle_follow(db, fan.id, creator.id, is_following=False)

    assert exc_info.value.kind is ErrorKind.ALREADY_FOLLOWING


def _favorite(favorite_id: int, category: str) -> FavoriteItem:
    now = datetime(2024, 5, 1, 12, 0, 0)
    return FavoriteItem(
        id=favorite_id,
        workId=favorite_id,
        createdAt=now,
        work=WorkListItem(
            id=favorite_id,
            title=f"作品{favorite_id}",
            category=category,
            coverImage="https://images.example.com/a.jpg",
            creatorId=1,
            createdAt=now,
            creator=CreatorBrief(id=1, username="potter")
        )
    )


def test_filter_favorites_by_category():
    favorites = [_favorite(1, "陶艺"), _favorite(2, "木工"), _favorite(3, "陶艺")]

    assert [f.id for f in filter_favorites_by_category(favorites, "陶艺")] == [1, 3]
    assert filter_favorites_by_category(favorites, "玻璃") == []
    assert filter_favorites_by_category(favorites, "全部") == favorites
    assert filter_favorites_by_category(favorites, None) == favorites


def test_collection_categories_keep_first_seen_order():
    favorites = [_favorite(1, "木工"), _favorite(2, "陶艺"), _favorite(3, "木工")]

    assert collection_categories(favorites) == ["全部", "木工", "陶艺"]


@pytest.mark.asyncio
async def test_collection_filters_but_keeps_all_categories(db, make_creator, make_work):
    creator = await make_creator("potter")
    fan = await make_creator("fan")
    cup = await make_work(creator.id, "青瓷茶杯", "陶艺")
    stool = await make_work(creator.id, "胡桃木小凳", "木工")
    await InteractionService.toggle_favorite(db, fan.id, cup.id, is_favorited=False)
    await InteractionService.toggle_favorite(db, fan.id, stool.id, is_favorited=False)

    collection = await InteractionService.get_collection(db, fan.id, "木工")

    assert [item.workId for item in collection.favorites] == [stool.id]
    assert collection.favorites[0].work.creator.username == "potter"
    assert set(collection.categories) == {"全部", "陶艺", "木工"}
    assert collection.selectedCategory == "木工"

    await InteractionService.remove_favorite(db, fan.id, stool.id)
    collection = await InteractionService.get_collection(db, fan.id)
    assert [item.workId for item in collection.favorites] == [cup.id]

    count = await db.execute(select(func.count()).select_from(Work))
    assert count.scalar_one() == 2
