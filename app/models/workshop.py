"""
工作坊活动模型
"""
from sqlalchemy import Column, String, Text, TIMESTAMP
from app.db.database import Base, BigIntId


class Workshop(Base):
    __tablename__ = "workshops"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
    location = Column(String(255), nullable=True)
    cover_image = Column(Text, nullable=True)
    signup_url = Column(Text, nullable=True)
