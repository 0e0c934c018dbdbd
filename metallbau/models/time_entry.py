from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from metallbau.database import Base


class TimeEntry(Base):
    __tablename__ = "time_entries"

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_time_entries_duration_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)

    company_id = Column(Integer, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)

    date = Column(Date, nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False)

    time_type_id = Column(Integer, ForeignKey("time_types.id"), nullable=False, index=True)
    activity_type_id = Column(Integer, ForeignKey("activity_types.id"), nullable=True)
    cost_center_id = Column(Integer, nullable=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    project_phase_id = Column(Integer, ForeignKey("project_phases.id"), nullable=True, index=True)
    machine_id = Column(Integer, ForeignKey("machines.id"), nullable=True)

    work_location = Column(String, nullable=False, default="WERKSTATT")  # WERKSTATT|BAUSTELLE

    base_hourly_rate_cents = Column(BigInteger, nullable=False)
    surcharge_total_cents = Column(BigInteger, nullable=False, default=0)
    effective_hourly_rate_cents = Column(BigInteger, nullable=False)
    total_cost_cents = Column(BigInteger, nullable=False)

    is_billable = Column(Boolean, nullable=False, default=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    surcharges = relationship("TimeEntrySurcharge", back_populates="time_entry", order_by="TimeEntrySurcharge.id")


class TimeEntrySurcharge(Base):
    __tablename__ = "time_entry_surcharges"

    id = Column(Integer, primary_key=True, index=True)
    time_entry_id = Column(
        Integer,
        ForeignKey("time_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    surcharge_type = Column(String, nullable=False)
    surcharge_percent = Column(Numeric(6, 2), nullable=True)
    surcharge_amount_cents = Column(BigInteger, nullable=True)

    time_entry = relationship("TimeEntry", back_populates="surcharges")
