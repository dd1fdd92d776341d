"""
测试客户端会话与路由守卫
"""
import json

import pytest

from app.client.session import (
    PROTECTED_ROUTES, TOKEN_KEY, USER_KEY, FileStorage, SessionHolder, resolve_route
)
from app.schemas.auth import SessionUser


@pytest.fixture
def storage(tmp_path):
    return FileStorage(tmp_path / "session.json")


def make_user(**fields) -> SessionUser:
    data = {"id": 7, "email": "potter@example.com", "username": "potter", "avatar": None, "bio": "做陶的"}
    data.update(fields)
    return SessionUser(**data)


def test_round_trip(storage):
    holder = SessionHolder(storage)
    user = make_user()
    holder.set_user(user, "token-1")

    restored = SessionHolder(storage)
    assert restored.restore() == user
    assert restored.access_token == "token-1"
    assert restored.is_authenticated


def test_corrupted_slot_starts_logged_out(storage):
    storage.set_item(USER_KEY, "{not json")
    holder = SessionHolder(storage)

    assert holder.restore() is None
    assert not holder.is_authenticated
    assert storage.get_item(USER_KEY) is None


def test_corrupted_file_starts_logged_out(storage):
    storage.path.write_text("\x00garbage", encoding="utf-8")
    holder = SessionHolder(storage)

    assert holder.restore() is None


def test_clear_removes_slots(storage):
    holder = SessionHolder(storage)
    holder.set_user(make_user(), "token-1")
    holder.set_user(None)

    assert holder.user is None
    data = json.loads(storage.path.read_text(encoding="utf-8"))
    assert USER_KEY not in data
    assert TOKEN_KEY not in data


def test_profile_edit_keeps_token(storage):
    holder = SessionHolder(storage)
    holder.set_user(make_user(), "token-1")
    holder.set_user(make_user(username="new-name"))

    restored = SessionHolder(storage)
    restored.restore()
    assert restored.user.username == "new-name"
    assert restored.access_token == "token-1"


def test_route_surface():
    assert "/login" not in PROTECTED_ROUTES
    assert len(PROTECTED_ROUTES) == 9


@pytest.mark.parametrize("path", [
    "/", "/work/12", "/creator/3", "/collection", "/publish",
    "/profile", "/workshops", "/my-workshops", "/my-works",
])
def test_protected_routes_redirect_when_anonymous(path):
    assert resolve_route(path, authenticated=False) == "/login"
    assert resolve_route(path, authenticated=True) == path


def test_login_route():
    assert resolve_route("/login", authenticated=False) == "/login"
    assert resolve_route("/login", authenticated=True) == "/"


def test_unknown_route_unchanged():
    assert resolve_route("/about", authenticated=False) == "/about"
    assert resolve_route("/work/1/edit", authenticated=False) == "/work/1/edit"


def test_holder_resolves_by_session(storage):
    holder = SessionHolder(storage)
    assert holder.resolve_route("/profile") == "/login"
    holder.set_user(make_user(), "token-1")
    assert holder.resolve_route("/profile") == "/profile"
