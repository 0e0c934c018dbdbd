from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, Numeric, String

from metallbau.database import Base


class ProjectBudgetLine(Base):
    __tablename__ = "project_budget_lines"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="RESTRICT"), nullable=False, index=True)
    project_phase_id = Column(Integer, ForeignKey("project_phases.id"), nullable=True, index=True)

    cost_type = Column(String, nullable=False)
    description = Column(String, nullable=False)
    planned_quantity = Column(Numeric(14, 4), nullable=False)
    planned_unit_price_cents = Column(BigInteger, nullable=False)
    planned_total_cents = Column(BigInteger, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
