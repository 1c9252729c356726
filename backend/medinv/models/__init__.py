from medinv.models.patient import Patient
from medinv.models.supplier import Supplier
from medinv.models.employee import Employee
from medinv.models.staff_account import StaffAccount
from medinv.models.medicine import Medicine
from medinv.models.inventory import Inventory
from medinv.models.order import Order, OrderItem
from medinv.models.medical_log import MedicalLog

__all__ = [
    "Patient", "Supplier", "Employee", "StaffAccount", "Medicine",
    "Inventory", "Order", "OrderItem", "MedicalLog",
]
