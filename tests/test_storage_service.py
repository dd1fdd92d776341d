"""
测试对象存储服务
"""
import re

import pytest
from oss2.exceptions import AccessDenied, NoSuchBucket, RequestError, ServerError

from app.core.errors import CraftHubError, ErrorKind
from app.services.storage_service import StorageService, build_object_path


def oss_error(cls, status: int, code: str):
    return cls(status, {}, b"", {"Code": code, "Message": code})


class FakeBucket:
    """模拟 oss2.Bucket，记录上传的对象"""

    def __init__(self, exists: bool = True, put_error: Exception = None, create_error: Exception = None):
        self.exists = exists
        self.put_error = put_error
        self.create_error = create_error
        self.objects = {}
        self.created_with = None

    def get_bucket_info(self):
        if not self.exists:
            raise oss_error(NoSuchBucket, 404, "NoSuchBucket")
        return object()

    def create_bucket(self, permission=None):
        if self.create_error:
            raise self.create_error
        self.created_with = permission
        self.exists = True

    def object_exists(self, key):
        return key in self.objects

    def put_object(self, key, data, headers=None):
        if self.put_error:
            raise self.put_error
        self.objects[key] = (data, headers)


def test_build_object_path():
    path = build_object_path(7, "gallery", "Photo.PNG", 2)
    assert re.fullmatch(r"7/\d{13}_gallery_2\.png", path)

    assert re.fullmatch(r"7/\d{13}_cover\.jpg", build_object_path(7, "cover", "noext"))


def test_upload_returns_public_url():
    bucket = FakeBucket()
    storage = StorageService(bucket)
    storage.custom_domain = None

    url = storage.upload("7/1_cover.jpg", b"data", "image/jpeg")

    assert url == f"https://{storage.bucket_name}.{storage.endpoint}/7/1_cover.jpg"
    data, headers = bucket.objects["7/1_cover.jpg"]
    assert headers["Content-Type"] == "image/jpeg"
    assert headers["Cache-Control"] == "max-age=3600"


def test_custom_domain_url():
    storage = StorageService(FakeBucket())
    storage.custom_domain = "https://cdn.crafthub.example/"

    assert storage.get_public_url("7/1_cover.jpg") == "https://cdn.crafthub.example/7/1_cover.jpg"


def test_upload_rejects_non_images_and_large_files():
    storage = StorageService(FakeBucket())

    with pytest.raises(CraftHubError) as exc_info:
        storage.upload("7/1_cover.pdf", b"data", "application/pdf")
    assert exc_info.value.kind is ErrorKind.VALIDATION

    with pytest.raises(CraftHubError) as exc_info:
        storage.upload("7/1_cover.jpg", b"x" * (10 * 1024 * 1024 + 1), "image/jpeg")
    assert exc_info.value.kind is ErrorKind.VALIDATION


def test_upload_never_overwrites():
    bucket = FakeBucket()
    storage = StorageService(bucket)
    storage.upload("7/1_cover.jpg", b"first", "image/jpeg")

    with pytest.raises(CraftHubError) as exc_info:
        storage.upload("7/1_cover.jpg", b"second", "image/jpeg")

    assert exc_info.value.kind is ErrorKind.CONFLICT
    assert bucket.objects["7/1_cover.jpg"][0] == b"first"


@pytest.mark.parametrize("error, kind", [
    (oss_error(AccessDenied, 403, "AccessDenied"), ErrorKind.PERMISSION_DENIED),
    (oss_error(NoSuchBucket, 404, "NoSuchBucket"), ErrorKind.STORAGE_UNAVAILABLE),
    (RequestError(ConnectionError("connection refused")), ErrorKind.NETWORK),
    (oss_error(ServerError, 500, "InternalError"), ErrorKind.UNKNOWN),
])
def test_upload_errors(error, kind):
    storage = StorageService(FakeBucket(put_error=error))

    with pytest.raises(CraftHubError) as exc_info:
        storage.upload("7/1_cover.jpg", b"data", "image/jpeg")

    assert exc_info.value.kind is kind


def test_ensure_bucket_creates_missing_bucket():
    bucket = FakeBucket(exists=False)
    StorageService(bucket).ensure_bucket()

    assert bucket.exists
    assert bucket.created_with == "public-read"


def test_create_bucket_already_exists_is_ok():
    bucket = FakeBucket(create_error=oss_error(ServerError, 409, "BucketAlreadyExists"))
    StorageService(bucket).create_bucket()


def test_create_bucket_permission_denied():
    bucket = FakeBucket(create_error=oss_error(AccessDenied, 403, "AccessDenied"))

    with pytest.raises(CraftHubError) as exc_info:
        StorageService(bucket).create_bucket()

    assert exc_info.value.kind is ErrorKind.PERMISSION_DENIED
