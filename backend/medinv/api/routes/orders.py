"""Orders: place an order (header + lines + optional stock decrement) and list orders."""
from typing import List

from fastapi import APIRouter, Depends, status

from medinv.api.deps import get_current_session, get_database
from medinv.core.audit import AuditLog
from medinv.db.database import Database
from medinv.schemas.order import OrderCreate, OrderCreated, OrderRow
from medinv.services import order_service

router = APIRouter()


@router.post("", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
async def create_order(
    data: OrderCreate,
    database: Database = Depends(get_database),
    session: dict = Depends(get_current_session),
):
    """
    Create an order in one transaction.

    With updateInventory, stock is decremented per line only where enough is
    on hand; lines that could not be reserved are listed in unreservedItems.
    """
    placement = await order_service.place_order(database, data)

    AuditLog.log_order_placed(
        order_id=placement.order_id,
        username=session.get("sub"),
        patient_id=data.patient_id,
        item_count=len(placement.lines),
        update_inventory=data.update_inventory,
        unreserved_items=placement.unreserved_items,
    )

    message = "Order created successfully"
    if placement.unreserved_items:
        message += f"; insufficient stock to reserve {len(placement.unreserved_items)} item(s)"
    return OrderCreated(
        order_id=placement.order_id,
        message=message,
        unreserved_items=placement.unreserved_items,
    )


@router.get("", response_model=List[OrderRow])
async def get_orders(database: Database = Depends(get_database)):
    """All order lines with patient, medicine and latest medical log date. No pagination."""
    return await order_service.list_orders(database)
