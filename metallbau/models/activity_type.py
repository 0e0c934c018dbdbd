from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from metallbau.database import Base


class ActivityType(Base):
    __tablename__ = "activity_types"

    __table_args__ = (
        UniqueConstraint("company_id", "code", name="uq_activity_types_company_code"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)  # FERTIGUNG|MONTAGE|PLANUNG
    description = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
