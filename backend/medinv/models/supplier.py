from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from medinv.db.base import Base


class Supplier(Base):
    __tablename__ = "Supplier"

    supplier_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
