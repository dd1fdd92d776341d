"""
CraftHub 手工艺品市集 - FastAPI应用主入口
"""
import logging

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import CraftHubError, ErrorKind, ERROR_MESSAGES, ERROR_STATUS, classify_db_error
from app.db.database import Base, get_db
from app.schemas.common import ErrorInfo
from app import models  # noqa: F401  注册全部数据表
from app.api import auth, works, creators, workshops, collection, storage

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# 创建FastAPI应用
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="CraftHub 手工艺品市集后端API",
    docs_url="/docs",
    redoc_url="/redoc"
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)

# 注册路由
app.include_router(auth.router)
app.include_router(works.router)
app.include_router(creators.router)
app.include_router(workshops.router)
app.include_router(collection.router)
app.include_router(storage.router)


def error_response(status_code: int, message: str, kind: str, fields: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "code": status_code,
            "message": message,
            "data": ErrorInfo(kind=kind, fields=fields or {}).model_dump()
        }
    )


@app.exception_handler(CraftHubError)
async def crafthub_error_handler(request: Request, exc: CraftHubError):
    """业务异常统一返回 {code, message, data: {kind, fields}}"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 失败: {exc.kind.value} {exc.message}")
    return error_response(exc.status_code, exc.message, exc.kind.value, exc.fields)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """未被服务层处理的数据库异常"""
    kind = classify_db_error(exc)
    logger.error(f"{request.method} {request.url.path} 数据库异常: {kind.value} {exc}")
    return error_response(ERROR_STATUS[kind], ERROR_MESSAGES[kind], kind.value)


@app.get("/")
async def root():
    """根路径"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "message": "CraftHub 后端API正在运行"
    }


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    健康检查：数据库连接和各业务表是否已创建
    """
    try:
        await db.execute(text("SELECT 1"))
        connection = await db.connection()
        existing = set(await connection.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))
    except SQLAlchemyError as e:
        kind = classify_db_error(e)
        logger.error(f"健康检查失败: {e}")
        return JSONResponse(
            status_code=ERROR_STATUS[kind],
            content={"status": "unhealthy", "database": False, "message": ERROR_MESSAGES[kind]}
        )

    tables = {name: name in existing for name in Base.metadata.tables}
    healthy = all(tables.values())
    return {
        "status": "healthy" if healthy else "degraded",
        "database": True,
        "tables": tables,
        "message": None if healthy else ERROR_MESSAGES[ErrorKind.SCHEMA_MISSING]
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
