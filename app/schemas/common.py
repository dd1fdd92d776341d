"""
通用Schema模型
"""
from pydantic import BaseModel
from typing import Any, Dict, Optional


class ResponseModel(BaseModel):
    """标准响应模型"""
    code: int = 200
    message: Optional[str] = None
    data: Optional[Any] = None


class ErrorInfo(BaseModel):
    """错误详情，fields 为表单字段到错误提示的映射"""
    kind: str
    fields: Dict[str, str] = {}


class UploadResponse(BaseModel):
    """图片上传结果"""
    url: str
    path: str
