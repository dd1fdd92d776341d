"""
创作者（用户）模型
"""
from sqlalchemy import Column, String, Text, Integer, TIMESTAMP, func
from app.db.database import Base, BigIntId


class Creator(Base):
    __tablename__ = "creators"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    followers_count = Column(Integer, nullable=False, default=0)
    works_count = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
