from datetime import datetime

from sqlalchemy import BigInteger, Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint

from metallbau.database import Base

COST_TYPES = ("LABOR", "MACHINE", "MATERIAL", "EXTERNAL", "OVERHEAD")


class ProjectCostEntry(Base):
    __tablename__ = "project_cost_entries"

    __table_args__ = (
        UniqueConstraint(
            "company_id",
            "source_type",
            "source_id",
            name="uq_project_cost_entries_source",
        ),
        Index("ix_project_cost_entries_company_project_type", "company_id", "project_id", "cost_type"),
    )

    id = Column(Integer, primary_key=True, index=True)

    company_id = Column(Integer, index=True, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="RESTRICT"), index=True, nullable=False)
    project_phase_id = Column(Integer, ForeignKey("project_phases.id"), index=True, nullable=True)

    entry_date = Column(Date, index=True, nullable=False)
    cost_type = Column(String, index=True, nullable=False)  # LABOR|MACHINE|MATERIAL|EXTERNAL|OVERHEAD
    source_type = Column(String, nullable=False)  # TIME_ENTRY|MACHINE_BOOKING|MATERIAL_CONSUMPTION
    source_id = Column(Integer, nullable=False)

    amount_cents = Column(BigInteger, nullable=False)
    is_direct_cost = Column(Boolean, nullable=False, default=True)
    description = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
