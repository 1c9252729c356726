from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Text
from sqlalchemy.sql import func
from medinv.db.base import Base


class MedicalLog(Base):
    __tablename__ = "MedicalLogs"

    log_id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("Patient.patient_id", ondelete="CASCADE"), nullable=False, index=True)
    medicine_id = Column(Integer, ForeignKey("Medicine.medicine_id"), nullable=True)
    log_date = Column(Date, nullable=False)
    dosage = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
