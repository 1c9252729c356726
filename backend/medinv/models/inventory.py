"""
On-hand stock per medicine and location.

A medicine may have several rows (one per shelf/location). The quantity
column must never go negative: order placement only decrements it through a
guarded UPDATE (`quantity >= requested`), and the CHECK constraint backs that
up at the storage level.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from medinv.db.base import Base


class Inventory(Base):
    __tablename__ = "Inventory"
    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),)

    inventory_id = Column(Integer, primary_key=True, autoincrement=True)
    medicine_id = Column(Integer, ForeignKey("Medicine.medicine_id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    location = Column(String(100), nullable=True)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    medicine = relationship("Medicine", backref="inventory_records")
