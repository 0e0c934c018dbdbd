from datetime import datetime

from sqlalchemy import BigInteger, Column, Date, DateTime, ForeignKey, Integer, Numeric, String

from metallbau.database import Base


class MaterialConsumption(Base):
    __tablename__ = "material_consumptions"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)

    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="RESTRICT"), nullable=False, index=True)
    project_phase_id = Column(Integer, ForeignKey("project_phases.id"), nullable=True)

    consumption_date = Column(Date, nullable=False)
    quantity = Column(Numeric(14, 4), nullable=False)
    unit = Column(String, nullable=False)
    # Snapshot of products.purchase_price_cents at booking time
    unit_price_cents = Column(BigInteger, nullable=False)
    total_cost_cents = Column(BigInteger, nullable=False)

    consumption_type = Column(String, nullable=False, default="PRODUCTION")  # PRODUCTION|SCRAP|RETURN
    scrap_quantity = Column(Numeric(14, 4), nullable=False, default=0)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
