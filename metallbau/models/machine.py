from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, Column, Date, DateTime, Integer, String, Text

from metallbau.database import Base


class Machine(Base):
    __tablename__ = "machines"

    __table_args__ = (
        CheckConstraint("hourly_rate_cents >= 0", name="ck_machines_hourly_rate_nonnegative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)

    name = Column(String, nullable=False)
    machine_type = Column(String, nullable=False, default="SONSTIGE")
    status = Column(String, nullable=False, default="ACTIVE", index=True)  # ACTIVE|MAINTENANCE|RETIRED
    cost_center_id = Column(Integer, nullable=True)

    hourly_rate_cents = Column(BigInteger, nullable=False)
    purchase_date = Column(Date, nullable=True)
    purchase_value_cents = Column(BigInteger, nullable=True)
    current_book_value_cents = Column(BigInteger, nullable=True)
    useful_life_years = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
