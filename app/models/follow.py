"""
关注关系模型
"""
from sqlalchemy import Column, BigInteger, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, func
from app.db.database import Base, BigIntId


class Follow(Base):
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uk_follower_following"),
        CheckConstraint("follower_id != following_id", name="ck_cannot_follow_self"),
    )

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    follower_id = Column(BigInteger, ForeignKey("creators.id", ondelete="CASCADE"), nullable=False, index=True)  # 粉丝
    following_id = Column(BigInteger, ForeignKey("creators.id", ondelete="CASCADE"), nullable=False, index=True)  # 被关注者
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
