"""
CraftHub API 客户端

封装各页面的数据操作：页面缓存、图片预加载、登录状态和错误提示。
所有请求错误都在这里捕获并转换为 Notice，不向调用方抛出。
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

import httpx
from pydantic import BaseModel, ValidationError

from app.core.config import settings
from app.core.errors import ERROR_MESSAGES, ErrorKind, translate_error_message
from app.models.work import ALL_CATEGORIES
from app.schemas.auth import LoginResponse, SessionUser
from app.schemas.common import UploadResponse
from app.schemas.creator import (
    CreatorStudioResponse, CreatorSummary, ExtendedProfileResponse, ExtendedProfileUpdate,
    FollowState, ProfileResponse
)
from app.schemas.work import (
    CollectionResponse, FavoriteState, LikeState, ReviewResponse, WorkCreate, WorkDetail, WorkListItem
)
from app.schemas.workshop import RegistrationCreate, RegistrationResponse, WorkshopResponse
from app.services.work_service import validate_work_form
from app.utils.image import PRIORITY_HIGH, PRIORITY_LOW, ImagePreloader, optimize_image_url
from app.utils.ttl_cache import TTLCache
from app.client.session import SessionHolder

logger = logging.getLogger(__name__)

# 首页封面预加载：前 12 张，其中前 6 张高优先级
WORK_COVER_PRELOAD = 12
WORK_COVER_HIGH = 6
WORK_COVER_SIZE = (400, 85)
AVATAR_SIZE = (80, 90)
WORKSHOP_COVER_HIGH = 6
WORKSHOP_COVER_SIZE = (400, 85)

WORKSHOPS_CACHE_KEY = "all"


class LoginState(str, Enum):
    ANONYMOUS = "anonymous"
    SUBMITTING = "submitting"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


@dataclass
class Notice:
    """
    页面提示

    kind 为空表示成功提示，否则为错误类型。
    """
    kind: Optional[ErrorKind]
    message: str
    created_at: float

    @property
    def is_error(self) -> bool:
        return self.kind is not None

    def is_visible(self, now: float) -> bool:
        return now - self.created_at < settings.NOTICE_SECONDS


class CraftHubAPIError(Exception):
    """服务端返回的错误"""

    def __init__(self, kind: ErrorKind, message: str, status_code: int = 0, fields: Optional[Dict[str, str]] = None):
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.fields = fields or {}
        super().__init__(message)


def translate_error(exc: Exception) -> ErrorKind:
    """
    将请求异常归类为错误类型

    服务端返回的 kind 优先；传输层异常为 NETWORK；其余按错误文本关键字匹配。
    """
    if isinstance(exc, CraftHubAPIError):
        return exc.kind
    if isinstance(exc, httpx.TransportError):
        return ErrorKind.NETWORK
    return translate_error_message(str(exc))


def _parse_error(response: httpx.Response, body: Any) -> CraftHubAPIError:
    body = body if isinstance(body, dict) else {}
    info = body.get("data") if isinstance(body.get("data"), dict) else {}
    message = body.get("message")
    if not message and body.get("detail"):
        message = str(body["detail"])

    try:
        kind = ErrorKind(info.get("kind"))
    except ValueError:
        if response.status_code == 422:
            kind = ErrorKind.VALIDATION
        elif response.status_code == 401:
            kind = ErrorKind.UNAUTHORIZED
        else:
            kind = translate_error_message(message or response.reason_phrase)
        message = ERROR_MESSAGES[kind]

    return CraftHubAPIError(kind, message or ERROR_MESSAGES[kind], response.status_code, info.get("fields"))


class CraftHubClient:
    """
    CraftHub 客户端

    Args:
        base_url: 后端地址
        session: 会话
        http: 可注入的 httpx.AsyncClient，为空时自动创建
        works_cache / workshops_cache / registrations_cache: 各页面缓存
        preloader: 图片预加载器
        clock: 时间函数，用于提示过期判断
    """

    def __init__(
        self,
        base_url: str,
        session: SessionHolder,
        http: Optional[httpx.AsyncClient] = None,
        works_cache: Optional[TTLCache] = None,
        workshops_cache: Optional[TTLCache] = None,
        registrations_cache: Optional[TTLCache] = None,
        preloader: Optional[ImagePreloader] = None,
        clock: Callable[[], float] = time.monotonic,
        storage_hosts: Optional[Iterable[str]] = None
    ):
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=base_url, timeout=30.0)
        self.session = session
        self.works_cache = works_cache or TTLCache(settings.CACHE_TTL_SECONDS, clock)
        self.workshops_cache = workshops_cache or TTLCache(settings.CACHE_TTL_SECONDS, clock)
        self.registrations_cache = registrations_cache or TTLCache(settings.CACHE_TTL_SECONDS, clock)
        self.preloader = preloader or ImagePreloader(self.http)
        self.storage_hosts = storage_hosts
        self._clock = clock

        self.login_state = LoginState.AUTHENTICATED if session.is_authenticated else LoginState.ANONYMOUS
        self.notice: Optional[Notice] = None
        self.form_errors: Dict[str, str] = {}

    async def aclose(self) -> None:
        await self.preloader.wait()
        if self._owns_http:
            await self.http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        schema: Optional[Type[BaseModel]] = None,
        many: bool = False,
        **kwargs
    ) -> Any:
        """
        发送请求并返回响应中的 data，失败时抛出 CraftHubAPIError

        Args:
            schema: 给定时按该模型解析 data，格式不符视为 UNKNOWN 错误
            many: data 为列表，逐项解析；空值返回空列表
        """
        headers = kwargs.pop("headers", {})
        if self.session.access_token:
            headers["Authorization"] = f"Bearer {self.session.access_token}"

        response = await self.http.request(method, path, headers=headers, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            raise _parse_error(response, body)
        data = body.get("data") if isinstance(body, dict) else None
        if schema is None:
            return data

        try:
            if many:
                return [schema.model_validate(item) for item in data or []]
            return schema.model_validate(data)
        except (ValidationError, TypeError) as e:
            logger.error(f"{method} {path} 响应格式错误: {e}")
            raise CraftHubAPIError(ErrorKind.UNKNOWN, ERROR_MESSAGES[ErrorKind.UNKNOWN], response.status_code)

    def _fail(self, exc: Exception, action: str) -> None:
        kind = translate_error(exc)
        message = exc.message if isinstance(exc, CraftHubAPIError) else ERROR_MESSAGES[kind]
        if isinstance(exc, CraftHubAPIError):
            self.form_errors = dict(exc.fields)
        logger.error(f"{action}失败: {kind.value} {exc}")
        self.notice = Notice(kind, message, self._clock())

    def _succeed(self, message: str) -> None:
        self.notice = Notice(None, message, self._clock())

    def current_notice(self) -> Optional[Notice]:
        """当前仍在显示期内的提示"""
        if self.notice and not self.notice.is_visible(self._clock()):
            self.notice = None
        return self.notice

    def _optimize(self, url: Optional[str], size) -> Optional[str]:
        width, quality = size
        return optimize_image_url(url, width, quality, self.storage_hosts) if url else url

    async def login(self, email: str, password: str) -> Optional[SessionUser]:
        self.login_state = LoginState.SUBMITTING
        try:
            result = await self._request(
                "POST", "/api/auth/login", LoginResponse, json={"email": email, "password": password}
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "登录")
            self.login_state = LoginState.ERROR
            return None

        self.session.set_user(result.user, result.accessToken)
        self.login_state = LoginState.AUTHENTICATED
        self.notice = None
        return result.user

    async def signup(self, email: str, password: str, username: Optional[str] = None) -> bool:
        """注册成功后回到未登录状态并提示用户登录"""
        self.login_state = LoginState.SUBMITTING
        try:
            await self._request(
                "POST", "/api/auth/signup",
                json={"email": email, "password": password, "username": username}
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "注册")
            self.login_state = LoginState.ERROR
            return False

        self.login_state = LoginState.ANONYMOUS
        self._succeed("注册成功！请使用您的邮箱和密码登录")
        return True

    def logout(self) -> None:
        self.session.clear()
        self.registrations_cache.clear()
        self.login_state = LoginState.ANONYMOUS

    async def load_works(self, category: Optional[str] = None) -> List[WorkListItem]:
        """首页作品列表，按分类缓存"""
        key = category or ALL_CATEGORIES
        cached = self.works_cache.get(key)
        if cached is not None:
            # 命中缓存也要预加载图片
            self._preload_works(cached)
            return cached

        params = {"category": key} if key != ALL_CATEGORIES else None
        try:
            works = await self._request("GET", "/api/works", WorkListItem, many=True, params=params)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载作品")
            return []

        self.works_cache.put(key, works)
        self._preload_works(works)
        return works

    def _preload_works(self, works: List[WorkListItem]) -> None:
        for index, work in enumerate(works[:WORK_COVER_PRELOAD]):
            priority = PRIORITY_HIGH if index < WORK_COVER_HIGH else PRIORITY_LOW
            self.preloader.schedule(self._optimize(work.coverImage, WORK_COVER_SIZE), priority)
        for work in works:
            if work.creator and work.creator.avatar:
                self.preloader.schedule(self._optimize(work.creator.avatar, AVATAR_SIZE), PRIORITY_HIGH)

    async def load_work(self, work_id: int) -> Optional[WorkDetail]:
        try:
            work = await self._request("GET", f"/api/works/{work_id}", WorkDetail)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载作品详情")
            return None
        return work

    async def load_reviews(self, work_id: int) -> List[ReviewResponse]:
        try:
            return await self._request("GET", f"/api/works/{work_id}/reviews", ReviewResponse, many=True)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载评价")
            return []

    async def submit_review(self, work_id: int, rating: int, comment: str = "") -> Optional[ReviewResponse]:
        try:
            review = await self._request(
                "POST", f"/api/works/{work_id}/reviews", ReviewResponse, json={"rating": rating, "comment": comment}
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "提交评价")
            return None
        self._succeed("评价提交成功")
        return review

    async def toggle_like(self, work_id: int, has_liked: bool) -> Optional[LikeState]:
        """
        切换点赞

        Args:
            has_liked: 页面当前显示的状态，决定本次是点赞还是取消
        """
        try:
            return await self._request(
                "POST", f"/api/works/{work_id}/like", LikeState, json={"hasLiked": has_liked}
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "点赞")
            return None

    async def toggle_favorite(self, work_id: int, is_favorited: bool) -> Optional[FavoriteState]:
        try:
            return await self._request(
                "POST", f"/api/works/{work_id}/favorite", FavoriteState, json={"isFavorited": is_favorited}
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "收藏")
            return None

    async def upload_image(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        kind: str = "cover",
        index: Optional[int] = None
    ) -> Optional[str]:
        """上传图片，返回公开访问URL"""
        if not content_type or not content_type.startswith("image/"):
            self._fail(CraftHubAPIError(ErrorKind.VALIDATION, "请选择图片文件（支持 JPG、PNG、GIF 等格式）"), "上传图片")
            return None
        if len(content) > settings.UPLOAD_MAX_BYTES:
            limit_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
            self._fail(CraftHubAPIError(ErrorKind.VALIDATION, f"图片大小不能超过{limit_mb}MB，请选择较小的图片文件"), "上传图片")
            return None

        form = {"kind": kind}
        if index is not None:
            form["index"] = str(index)
        try:
            result = await self._request(
                "POST", "/api/storage/upload", UploadResponse,
                files={"file": (filename, content, content_type)},
                data=form
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "上传图片")
            return None
        return result.url

    async def publish_work(self, form: WorkCreate) -> Optional[WorkListItem]:
        """发布作品，提交前先在本地校验表单"""
        self.form_errors = validate_work_form(form)
        if self.form_errors:
            first_message = next(iter(self.form_errors.values()))
            self.notice = Notice(ErrorKind.VALIDATION, first_message, self._clock())
            return None

        try:
            item = await self._request("POST", "/api/works", WorkListItem, json=form.model_dump())
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "发布作品")
            return None

        self.works_cache.clear()
        self._succeed("作品发布成功！")
        return item

    async def load_my_works(self, limit: Optional[int] = None) -> List[WorkListItem]:
        params = {"limit": limit} if limit else None
        try:
            return await self._request("GET", "/api/my-works", WorkListItem, many=True, params=params)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载我的作品")
            return []

    async def delete_work(self, work_id: int) -> bool:
        try:
            await self._request("DELETE", f"/api/my-works/{work_id}")
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "删除作品")
            return False
        self.works_cache.clear()
        self._succeed("作品已删除")
        return True

    async def load_workshops(self) -> List[WorkshopResponse]:
        cached = self.workshops_cache.get(WORKSHOPS_CACHE_KEY)
        if cached is not None:
            self._preload_workshops(cached)
            return cached

        try:
            workshops = await self._request("GET", "/api/workshops", WorkshopResponse, many=True)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载工作坊")
            return []

        self.workshops_cache.put(WORKSHOPS_CACHE_KEY, workshops)
        self._preload_workshops(workshops)
        return workshops

    def _preload_workshops(self, workshops: List[WorkshopResponse]) -> None:
        for index, workshop in enumerate(workshops):
            if workshop.coverImage:
                priority = PRIORITY_HIGH if index < WORKSHOP_COVER_HIGH else PRIORITY_LOW
                self.preloader.schedule(self._optimize(workshop.coverImage, WORKSHOP_COVER_SIZE), priority)

    async def register_workshop(self, workshop_id: int, form: RegistrationCreate) -> Optional[RegistrationResponse]:
        try:
            registration = await self._request(
                "POST", f"/api/workshops/{workshop_id}/registrations", RegistrationResponse,
                json=form.model_dump()
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "报名")
            return None

        if self.session.user:
            self.registrations_cache.delete(self.session.user.id)
        self._succeed("报名成功！我们会尽快与您联系")
        return registration

    async def load_registrations(self) -> List[RegistrationResponse]:
        """我的报名，按用户缓存"""
        if not self.session.user:
            return []
        user_id = self.session.user.id
        cached = self.registrations_cache.get(user_id)
        if cached is not None:
            self._preload_registrations(cached)
            return cached

        try:
            registrations = await self._request("GET", "/api/my-workshops", RegistrationResponse, many=True)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载我的报名")
            return []

        self.registrations_cache.put(user_id, registrations)
        self._preload_registrations(registrations)
        return registrations

    def _preload_registrations(self, registrations: List[RegistrationResponse]) -> None:
        for registration in registrations:
            if registration.workshop and registration.workshop.coverImage:
                cover = self._optimize(registration.workshop.coverImage, WORKSHOP_COVER_SIZE)
                self.preloader.schedule(cover, PRIORITY_HIGH)

    async def cancel_registration(self, registration_id: int) -> List[RegistrationResponse]:
        """取消报名后丢弃当前用户的缓存并重新加载"""
        try:
            await self._request("DELETE", f"/api/my-workshops/{registration_id}")
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "取消报名")
            return await self.load_registrations()

        if self.session.user:
            self.registrations_cache.delete(self.session.user.id)
        self._succeed("已取消报名")
        return await self.load_registrations()

    async def load_collection(self, category: Optional[str] = None) -> Optional[CollectionResponse]:
        params = {"category": category} if category else None
        try:
            return await self._request("GET", "/api/collection", CollectionResponse, params=params)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载收藏")
            return None

    async def remove_favorite(self, work_id: int) -> bool:
        try:
            await self._request("DELETE", f"/api/collection/{work_id}")
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "取消收藏")
            return False
        self._succeed("已取消收藏")
        return True

    async def load_creator(self, creator_id: int) -> Optional[CreatorStudioResponse]:
        try:
            return await self._request("GET", f"/api/creators/{creator_id}", CreatorStudioResponse)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载创作者主页")
            return None

    async def load_followers(self, creator_id: int, following: bool = False) -> List[CreatorSummary]:
        """粉丝列表；following 为 True 时返回关注列表"""
        path = f"/api/creators/{creator_id}/{'following' if following else 'followers'}"
        try:
            return await self._request("GET", path, CreatorSummary, many=True)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载关注列表")
            return []

    async def toggle_follow(self, creator_id: int, is_following: bool) -> Optional[FollowState]:
        try:
            return await self._request(
                "POST", f"/api/creators/{creator_id}/follow", FollowState, json={"isFollowing": is_following}
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "关注")
            return None

    async def load_profile(self) -> Optional[ProfileResponse]:
        try:
            return await self._request("GET", "/api/profile", ProfileResponse)
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "加载个人资料")
            return None

    async def update_profile(
        self,
        username: str,
        avatar: Optional[str] = None,
        bio: Optional[str] = None
    ) -> Optional[SessionUser]:
        """更新基本信息，成功后同步到会话"""
        try:
            user = await self._request(
                "PUT", "/api/profile", SessionUser, json={"username": username, "avatar": avatar, "bio": bio}
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "更新基本信息")
            return None

        self.session.set_user(user)
        self._succeed("基本信息更新成功！")
        return user

    async def save_extended_profile(self, form: ExtendedProfileUpdate) -> Optional[ExtendedProfileResponse]:
        try:
            profile = await self._request(
                "PUT", "/api/profile/extended", ExtendedProfileResponse, json=form.model_dump()
            )
        except (CraftHubAPIError, httpx.HTTPError) as e:
            self._fail(e, "保存扩展资料")
            return None
        self._succeed("扩展资料保存成功！")
        return profile
