from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text
from sqlalchemy.sql import func
from medinv.db.base import Base


class Medicine(Base):
    __tablename__ = "Medicine"

    medicine_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    unit = Column(String(50), nullable=True)  # bottle, pack, box, strip
    expiry_date = Column(Date, nullable=True)
    manufacturer = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
