"""
评价模型
"""
from sqlalchemy import Column, BigInteger, Text, SmallInteger, TIMESTAMP, ForeignKey, CheckConstraint, func
from app.db.database import Base, BigIntId


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating"),
    )

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    work_id = Column(BigInteger, ForeignKey("works.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(BigInteger, ForeignKey("creators.id", ondelete="CASCADE"), nullable=False)
    rating = Column(SmallInteger, nullable=False, default=5)
    comment = Column(Text, nullable=False, default="")
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
