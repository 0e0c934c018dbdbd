from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from metallbau.database import Base


class ProjectPhase(Base):
    __tablename__ = "project_phases"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="RESTRICT"), nullable=False, index=True)

    name = Column(String, nullable=False)
    phase_type = Column(String, nullable=False)  # PLANUNG|FERTIGUNG|MONTAGE|ABSCHLUSS
    sequence = Column(Integer, nullable=False, default=1)

    budget_amount_cents = Column(BigInteger, nullable=False, default=0)
    # Maintained outside the booking paths; controlling passes it through as stored.
    actual_amount_cents = Column(BigInteger, nullable=False, default=0)

    planned_start = Column(Date, nullable=True)
    planned_end = Column(Date, nullable=True)

    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    project = relationship("Project", back_populates="phases")
