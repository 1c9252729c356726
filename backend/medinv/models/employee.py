from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from medinv.db.base import Base


class Employee(Base):
    __tablename__ = "Employee"

    employee_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(32), nullable=True)
    role = Column(String(64), nullable=True)  # Doctor, Nurse, Pharmacist
    created_at = Column(DateTime(timezone=True), server_default=func.now())
