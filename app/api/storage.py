"""
图片上传API
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.core.errors import CraftHubError, ErrorKind
from app.schemas.common import ResponseModel, UploadResponse
from app.services.storage_service import StorageService, build_object_path, get_storage_service
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api", tags=["图片上传"])

UPLOAD_KINDS = ("cover", "gallery", "avatar", "banner")


@router.post("/storage/upload", response_model=ResponseModel)
async def upload_image(
    file: UploadFile = File(...),
    kind: str = Form("cover"),
    index: Optional[int] = Form(None),
    storage: StorageService = Depends(get_storage_service),
    current_user_id: int = Depends(get_current_user_id)
):
    """
    上传图片到对象存储，返回公开访问URL

    对象路径以当前用户ID开头，kind 为 cover / gallery / avatar / banner。
    """
    if kind not in UPLOAD_KINDS:
        raise CraftHubError(ErrorKind.VALIDATION, "不支持的图片类型")

    data = await file.read()
    path = build_object_path(current_user_id, kind, file.filename or "", index)

    # oss2 为同步客户端，放到线程池中执行
    await run_in_threadpool(storage.ensure_bucket)
    url = await run_in_threadpool(storage.upload, path, data, file.content_type)

    return ResponseModel(
        code=200,
        message="图片上传成功",
        data=UploadResponse(url=url, path=path)
    )
