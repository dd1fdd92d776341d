"""
创作者扩展资料模型
"""
from sqlalchemy import Column, BigInteger, String, Text, JSON, TIMESTAMP, ForeignKey, func
from app.db.database import Base, BigIntId


class CreatorProfile(Base):
    __tablename__ = "creator_profiles"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    creator_id = Column(BigInteger, ForeignKey("creators.id", ondelete="CASCADE"), unique=True, nullable=False)
    banner_image = Column(Text, nullable=True)
    location = Column(String(128), nullable=True)
    website = Column(String(255), nullable=True)
    instagram = Column(String(128), nullable=True)
    wechat = Column(String(128), nullable=True)
    specialties = Column(JSON, nullable=False, default=list)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
