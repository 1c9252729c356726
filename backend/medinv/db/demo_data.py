"""Demo dataset for DEPLOYMENT_MODE=demo. Lets the dashboard run without real data."""
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from medinv.models import (
    Employee, Inventory, MedicalLog, Medicine, Order, OrderItem, Patient, Supplier,
)

PATIENTS = [
    (1, "John Doe", "john.doe@example.com", "1234567890"),
    (2, "Jane Smith", "jane.smith@example.com", "9876543210"),
    (3, "Rajesh Kumar", "rajesh@example.com", "9876543210"),
]

SUPPLIERS = [
    (1, "MediSupply Inc.", "contact@medisupply.com", "1122334455"),
    (2, "PharmaWholesale", "info@pharmawholesale.com", "5566778899"),
]

EMPLOYEES = [
    (1, "Dr. Mike Johnson", "mike.johnson@hospital.com", "1231231234", "Doctor"),
    (2, "Nurse Sarah Williams", "sarah.williams@hospital.com", "4564564567", "Nurse"),
]

MEDICINES = [
    # id, name, description, price, unit, expiry, manufacturer
    (1, "Paracetamol", "Pain reliever and fever reducer", "9.99", "bottle", date(2025, 12, 31), "MediCorp"),
    (2, "Amoxicillin", "Antibiotic medication", "19.99", "pack", date(2025, 6, 30), "PharmaCorp"),
    (3, "Loratadine", "Antihistamine for allergies", "15.50", "box", date(2026, 1, 15), "AllergyMeds Inc."),
]

INVENTORY = [
    (1, 1, 100, "Shelf A1"),
    (2, 2, 50, "Shelf B2"),
    (3, 3, 75, "Shelf C3"),
]

MEDICAL_LOGS = [
    (1, 1, 1, date(2025, 5, 15), "1 tablet every 6 hours", "Patient reported headache relief after first dose"),
    (2, 2, 2, date(2025, 5, 16), "1 capsule twice daily", "Treating respiratory infection"),
]


def seed_demo_data(session: Session) -> None:
    session.add_all(
        Patient(patient_id=pid, name=name, email=email, phone_number=phone)
        for pid, name, email, phone in PATIENTS
    )
    session.add_all(
        Supplier(supplier_id=sid, name=name, email=email, phone_number=phone)
        for sid, name, email, phone in SUPPLIERS
    )
    session.add_all(
        Employee(employee_id=eid, name=name, email=email, phone_number=phone, role=role)
        for eid, name, email, phone, role in EMPLOYEES
    )
    session.add_all(
        Medicine(
            medicine_id=mid, name=name, description=desc, price=Decimal(price),
            unit=unit, expiry_date=expiry, manufacturer=maker,
        )
        for mid, name, desc, price, unit, expiry, maker in MEDICINES
    )
    session.flush()

    session.add_all(
        Inventory(inventory_id=iid, medicine_id=mid, quantity=qty, location=loc)
        for iid, mid, qty, loc in INVENTORY
    )
    session.add_all(
        MedicalLog(log_id=lid, patient_id=pid, medicine_id=mid, log_date=when, dosage=dosage, notes=notes)
        for lid, pid, mid, when, dosage, notes in MEDICAL_LOGS
    )
    session.add(Order(order_id=1, patient_id=1, supplier_id=1, employee_id=1))
    session.flush()
    session.add(OrderItem(order_id=1, medicine_id=1, quantity=2))
    session.flush()
