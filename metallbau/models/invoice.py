from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String

from metallbau.database import Base


class Invoice(Base):
    """Revenue document linked to a project; only the totals matter to controlling."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    number = Column(String, nullable=False)
    status = Column(String, nullable=False, default="DRAFT")  # DRAFT|SENT|PAID|CANCELLED
    total_amount_cents = Column(BigInteger, nullable=False, default=0)
    paid_amount_cents = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
