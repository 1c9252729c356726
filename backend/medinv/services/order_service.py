"""
Order placement and order listing.

place_order writes one Orders row and one OrderItems row per line inside a
single transaction, then optionally decrements stock with a guarded UPDATE
per line. Either the header and all lines are committed or nothing is.

Stock policy (ORDER_STOCK_POLICY):
- best_effort: a decrement that matches no Inventory row (not enough stock,
  or no row for that medicine) leaves stock untouched and the order still
  succeeds. Such lines are reported back as unreserved_items.
- strict: the first unmatched decrement aborts and rolls back the order.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import func, insert, select, update

from medinv.core.exceptions import InsufficientStock, InvalidRequest, MedInvError, OrderCreationFailed
from medinv.db.database import Database
from medinv.db.errors import StorageError
from medinv.models import Inventory, MedicalLog, Medicine, Order, OrderItem, Patient
from medinv.schemas.order import OrderCreate

logger = logging.getLogger(__name__)

orders_table = Order.__table__
order_items_table = OrderItem.__table__
inventory_table = Inventory.__table__


@dataclass
class OrderLine:
    medicine_id: int
    quantity: int


@dataclass
class OrderPlacement:
    order_id: int
    lines: List[OrderLine]
    unreserved_items: List[int] = field(default_factory=list)


def validate_order(order: OrderCreate) -> List[OrderLine]:
    """Check required fields before any connection is taken. Returns the lines in input order."""
    if not order.patient_id or not order.items:
        raise InvalidRequest("Patient ID and at least one item are required")

    lines = []
    for position, item in enumerate(order.items, start=1):
        if not item.medicine_id or item.quantity is None:
            raise InvalidRequest(f"Item {position}: medicine_id and quantity are required")
        if item.quantity < 1:
            raise InvalidRequest(f"Item {position}: quantity must be a positive integer")
        lines.append(OrderLine(medicine_id=item.medicine_id, quantity=item.quantity))
    return lines


async def place_order(
    database: Database,
    order: OrderCreate,
    stock_policy: Optional[str] = None,
    isolation_level: Optional[str] = None,
) -> OrderPlacement:
    """
    Validate and persist an order.

    Raises:
        InvalidRequest: required fields missing (nothing written)
        InsufficientStock: strict policy and a line could not be reserved (rolled back)
        OrderCreationFailed: any other error while writing (rolled back)
        ConnectionExhausted: no connection available
    """
    lines = validate_order(order)
    stock_policy = stock_policy or database.settings.ORDER_STOCK_POLICY
    isolation_level = isolation_level or database.settings.ORDER_ISOLATION_LEVEL
    unreserved: List[int] = []

    try:
        async with database.transaction(isolation_level=isolation_level) as conn:
            result = await conn.execute(
                insert(orders_table).values(
                    patient_id=order.patient_id,
                    supplier_id=order.supplier_id,
                    employee_id=order.employee_id,
                    order_date=func.now(),
                )
            )
            order_id = result.inserted_primary_key[0]

            for line in lines:
                await conn.execute(
                    insert(order_items_table).values(
                        order_id=order_id,
                        medicine_id=line.medicine_id,
                        quantity=line.quantity,
                    )
                )

            if order.update_inventory:
                for line in lines:
                    # Guarded decrement: matches no row when stock is short
                    result = await conn.execute(
                        update(inventory_table)
                        .where(
                            inventory_table.c.medicine_id == line.medicine_id,
                            inventory_table.c.quantity >= line.quantity,
                        )
                        .values(quantity=inventory_table.c.quantity - line.quantity)
                    )
                    if result.rowcount == 0:
                        if stock_policy == "strict":
                            raise InsufficientStock(line.medicine_id, line.quantity)
                        unreserved.append(line.medicine_id)
    except StorageError as e:
        logger.error(f"Order for patient {order.patient_id} rolled back ({e.kind.value}): {e.message}")
        raise OrderCreationFailed(details=e.message) from e
    except MedInvError:
        raise
    except Exception as e:
        # Driver errors SQLAlchemy does not wrap (e.g. integer overflow in the DBAPI)
        logger.exception(f"Order for patient {order.patient_id} rolled back")
        raise OrderCreationFailed(details=str(e)) from e

    if unreserved:
        logger.warning(f"Order {order_id} committed without reserving stock for medicines {unreserved}")
    logger.info(f"Order {order_id} created with {len(lines)} item(s) for patient {order.patient_id}")
    return OrderPlacement(order_id=order_id, lines=lines, unreserved_items=unreserved)


async def list_orders(database: Database) -> List[Dict[str, Any]]:
    """One row per order line, newest first, with the patient's latest medical log date."""
    latest_log = (
        select(MedicalLog.patient_id, func.max(MedicalLog.log_date).label("log_date"))
        .group_by(MedicalLog.patient_id)
        .subquery()
    )
    statement = (
        select(
            Order.order_id,
            Patient.name.label("patient_name"),
            Patient.patient_id,
            Medicine.name.label("medicine_name"),
            Order.order_date,
            latest_log.c.log_date,
        )
        .select_from(Order)
        .join(Patient, Order.patient_id == Patient.patient_id)
        .join(OrderItem, OrderItem.order_id == Order.order_id)
        .join(Medicine, OrderItem.medicine_id == Medicine.medicine_id)
        .outerjoin(latest_log, latest_log.c.patient_id == Patient.patient_id)
        .order_by(Order.order_date.desc(), Order.order_id.desc(), OrderItem.medicine_id)
    )
    return await database.fetch_all(statement)
