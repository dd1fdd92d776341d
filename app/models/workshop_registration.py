"""
工作坊报名模型
"""
from sqlalchemy import Column, BigInteger, String, Text, TIMESTAMP, ForeignKey, UniqueConstraint, func
from app.db.database import Base, BigIntId


class WorkshopRegistration(Base):
    __tablename__ = "workshop_registrations"
    __table_args__ = (
        UniqueConstraint("user_id", "workshop_id", name="uk_registration_user_workshop"),
    )

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(BigInteger, ForeignKey("creators.id", ondelete="CASCADE"), nullable=False, index=True)
    workshop_id = Column(BigInteger, ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(64), nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
