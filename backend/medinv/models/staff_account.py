"""
Staff login accounts. One account per username, optionally linked to an Employee.
The password column holds a bcrypt hash, never plain text.
"""
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from medinv.db.base import Base


class StaffAccount(Base):
    __tablename__ = "EmployeeAccounts"

    username = Column(String(64), primary_key=True)
    password = Column(String(255), nullable=False)
    employee_id = Column(Integer, ForeignKey("Employee.employee_id", ondelete="SET NULL"), nullable=True)

    employee = relationship("Employee", backref="accounts")
