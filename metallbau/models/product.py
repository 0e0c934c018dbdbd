from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, Integer, Numeric, String

from metallbau.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    sku = Column(String, nullable=True)
    unit = Column(String, nullable=False, default="Stk")
    purchase_price_cents = Column(BigInteger, nullable=False, default=0)
    # No non-negative check: consumption may overdraw stock.
    stock_quantity = Column(Numeric(14, 4), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
