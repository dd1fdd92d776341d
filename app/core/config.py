"""
应用配置文件
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """应用配置"""

    # 应用基本配置
    APP_NAME: str = "CraftHub"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DB_USERNAME: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "crafthub"
    DATABASE_URL_OVERRIDE: Optional[str] = None  # 完整连接串，设置后忽略上面的分项配置

    # JWT配置
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # CORS配置
    CORS_ORIGINS: list = ["*"]

    # 对象存储配置（阿里云OSS）
    OSS_ENDPOINT: str = "oss-cn-hangzhou.aliyuncs.com"
    OSS_ACCESS_KEY: Optional[str] = None
    OSS_SECRET_KEY: Optional[str] = None
    OSS_BUCKET: str = "works"
    OSS_CUSTOM_DOMAIN: Optional[str] = None
    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB
    UPLOAD_CACHE_CONTROL: str = "max-age=3600"

    # 业务配置
    LIST_LIMIT: int = 50  # 列表接口单次最多返回条数
    SIGNUP_USERNAME_ATTEMPTS: int = 5  # 用户名冲突时的最大尝试次数
    PASSWORD_MIN_LENGTH: int = 6

    # 客户端配置
    CACHE_TTL_SECONDS: float = 30.0  # 页面数据缓存有效期
    PRELOAD_IDLE_DELAY_SECONDS: float = 0.1  # 低优先级图片预加载延迟
    NOTICE_SECONDS: float = 5.0  # 提示框自动关闭时间

    @property
    def DATABASE_URL(self) -> str:
        """获取数据库连接URL"""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.DB_USERNAME}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
