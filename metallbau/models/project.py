from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from metallbau.database import Base

CLOSED_PROJECT_STATUSES = ("COMPLETED", "CANCELLED")


class Project(Base):
    __tablename__ = "projects"

    __table_args__ = (
        UniqueConstraint("company_id", "number", name="uq_projects_company_number"),
        CheckConstraint("budget_cents >= 0", name="ck_projects_budget_cents_nonnegative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)

    number = Column(String, nullable=False)
    name = Column(String, nullable=False)
    project_type = Column(String, nullable=False, default="KOMBINIERT")  # WERKSTATT|MONTAGE|KOMBINIERT
    status = Column(String, nullable=False, default="ACTIVE", index=True)

    budget_cents = Column(BigInteger, nullable=False, default=0)
    # Running total of project_cost_entries.amount_cents, only ever incremented in SQL
    actual_cost_total_cents = Column(BigInteger, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    phases = relationship("ProjectPhase", back_populates="project", order_by="ProjectPhase.sequence")

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_PROJECT_STATUSES
