from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderItemIn(BaseModel):
    # Presence is checked by the order workflow so a missing field is a 400, not a 422
    medicine_id: Optional[int] = None
    quantity: Optional[int] = None


class OrderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    patient_id: Optional[int] = None
    supplier_id: Optional[int] = None
    employee_id: Optional[int] = None
    items: Optional[List[OrderItemIn]] = None
    update_inventory: bool = Field(False, alias="updateInventory")


class OrderCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    order_id: int = Field(alias="orderId")
    message: str
    unreserved_items: List[int] = Field(default_factory=list, alias="unreservedItems")


class OrderRow(BaseModel):
    order_id: int
    patient_name: str
    patient_id: int
    medicine_name: str
    order_date: Optional[datetime] = None
    log_date: Optional[date] = None
