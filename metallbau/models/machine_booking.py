from datetime import datetime

from sqlalchemy import BigInteger, Column, Date, DateTime, ForeignKey, Integer, Numeric, String

from metallbau.database import Base


class MachineBooking(Base):
    __tablename__ = "machine_bookings"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)

    machine_id = Column(Integer, ForeignKey("machines.id", ondelete="RESTRICT"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="RESTRICT"), nullable=False, index=True)
    project_phase_id = Column(Integer, ForeignKey("project_phases.id"), nullable=True)

    booking_date = Column(Date, nullable=False)
    duration_hours = Column(Numeric(10, 2), nullable=False)
    # Snapshot of machines.hourly_rate_cents at booking time
    hourly_rate_cents = Column(BigInteger, nullable=False)
    total_cost_cents = Column(BigInteger, nullable=False)

    operator_id = Column(String, nullable=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
