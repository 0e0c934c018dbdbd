from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from metallbau.database import Base


class TimeType(Base):
    __tablename__ = "time_types"

    __table_args__ = (
        UniqueConstraint("company_id", "code", name="uq_time_types_company_code"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)

    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    is_project_relevant = Column(Boolean, nullable=False, default=False)
    is_billable = Column(Boolean, nullable=False, default=False)
    affects_capacity = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
