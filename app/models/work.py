"""
作品模型
"""
from sqlalchemy import Column, BigInteger, String, Text, Integer, Numeric, JSON, TIMESTAMP, ForeignKey, Index, func
from app.db.database import Base, BigIntId

# 作品分类
WORK_CATEGORIES = ["陶艺", "绘画", "编织", "木工", "玻璃", "皮具", "珠宝", "其他"]
# 不筛选分类时使用的值
ALL_CATEGORIES = "全部"


class Work(Base):
    __tablename__ = "works"
    __table_args__ = (
        Index("idx_works_category_created", "category", "created_at"),
    )

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    title = Column(String(60), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(16), nullable=False)
    cover_image = Column(Text, nullable=False)
    images = Column(JSON, nullable=False, default=list)
    price = Column(Numeric(10, 2), nullable=True)  # 为空表示免费
    likes_count = Column(Integer, nullable=False, default=0)
    creator_id = Column(BigInteger, ForeignKey("creators.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
