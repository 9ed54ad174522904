from typing import Optional, Sequence, Tuple

from pydantic import BaseModel

from procurement.errors import ValidationError
from procurement.models.item import StockUnit
from procurement.models.purchase_order import LineItem, PurchaseOrder


class OrderTotals(BaseModel):
    item_total: float = 0.0
    discount: float = 0.0
    net_amount: float = 0.0


def price_line(unit_price: float, order_qty: int, discount: float = 0.0) -> Tuple[float, float]:
    """Return ``(item_amount, net_amount)`` for one line, rejecting invalid inputs."""
    if order_qty is None or order_qty < 1:
        raise ValidationError("Quantity must be at least 1")
    if unit_price is None or unit_price < 0:
        raise ValidationError("Unit price cannot be negative")
    if discount < 0:
        raise ValidationError("Discount cannot be negative")

    item_amount = unit_price * order_qty
    if discount > item_amount:
        raise ValidationError("Discount cannot exceed the item amount")
    return item_amount, item_amount - discount


def build_line(
    item_id: str,
    order_qty: int,
    unit_price: float,
    discount: float = 0.0,
    packing_unit: Optional[StockUnit] = None,
) -> LineItem:
    item_amount, net_amount = price_line(unit_price, order_qty, discount)
    return LineItem(
        item=item_id,
        packing_unit=packing_unit,
        order_qty=order_qty,
        unit_price=unit_price,
        item_amount=item_amount,
        discount=discount,
        net_amount=net_amount,
    )


def compute_totals(lines: Sequence[LineItem]) -> OrderTotals:
    item_total = sum(line.item_amount for line in lines)
    discount = sum(line.discount for line in lines)
    return OrderTotals(item_total=item_total, discount=discount, net_amount=item_total - discount)


def apply_totals(order: PurchaseOrder) -> PurchaseOrder:
    """Overwrite the order's aggregates from its current lines."""
    totals = compute_totals(order.items)
    order.item_total = totals.item_total
    order.discount = totals.discount
    order.net_amount = totals.net_amount
    return order
