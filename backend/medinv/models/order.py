"""
Order header and order lines.

Order: one row per checkout (who ordered, when). Never updated after creation.
OrderItem: one medicine+quantity entry, keyed by (order_id, medicine_id), so a
medicine appears at most once per order. Both are written in one transaction
by medinv.services.order_service.place_order.
"""
from sqlalchemy import Column, Integer, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from medinv.db.base import Base


class Order(Base):
    __tablename__ = "Orders"

    order_id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("Patient.patient_id"), nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("Supplier.supplier_id"), nullable=True)
    employee_id = Column(Integer, ForeignKey("Employee.employee_id"), nullable=True)
    order_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("Patient", backref="orders")
    items = relationship("OrderItem", back_populates="order")


class OrderItem(Base):
    __tablename__ = "OrderItems"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),)

    order_id = Column(Integer, ForeignKey("Orders.order_id", ondelete="CASCADE"), primary_key=True)
    medicine_id = Column(Integer, ForeignKey("Medicine.medicine_id"), primary_key=True)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    medicine = relationship("Medicine")
