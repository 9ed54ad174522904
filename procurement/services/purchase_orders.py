import logging
from datetime import datetime
from typing import Dict, List, Sequence

from procurement.database import Database
from procurement.errors import NotFoundError
from procurement.models.item import Item
from procurement.models.purchase_order import (
    ItemRef,
    LineItem,
    LineItemInput,
    LineItemView,
    OrderTotalsSummary,
    PurchaseOrder,
    PurchaseOrderCreate,
    PurchaseOrderUpdate,
    PurchaseOrderView,
    SupplierRef,
)
from procurement.models.supplier import Supplier
from procurement.repositories.base import to_object_id
from procurement.services.numbering import ORDER_PREFIX, next_identifier
from procurement.services.order_pdf import render_order_pdf
from procurement.services.totals import apply_totals, build_line

logger = logging.getLogger(__name__)


class PurchaseOrderManager:
    """
    Creates and maintains purchase orders.

    Every reference (supplier, items) is resolved before anything is written,
    so a failed create or update leaves the stored order untouched. Aggregates
    are recomputed from the lines on every save, whatever the client sent.
    """

    def __init__(self, db: Database):
        self.db = db

    async def create(self, payload: PurchaseOrderCreate) -> PurchaseOrder:
        supplier = await self._resolve_supplier(payload.supplier_id)
        lines = await self._resolve_lines(payload.items)

        order = PurchaseOrder(
            order_no=await next_identifier(self.db.purchase_orders, "orderNo", ORDER_PREFIX),
            order_date=payload.order_date or datetime.utcnow(),
            supplier=supplier.id,
            supplier_display_name=supplier.supplier_name,
            items=lines,
        )
        apply_totals(order)

        await self.db.purchase_orders.create(order)
        logger.info(f"Created purchase order {order.order_no} for supplier {supplier.supplier_no} "
                    f"({len(lines)} lines, net {order.net_amount})")
        return order

    async def update(self, order_id: str, patch: PurchaseOrderUpdate) -> PurchaseOrder:
        order = await self._load(order_id)

        if patch.order_date is not None:
            order.order_date = patch.order_date
        if patch.supplier_id is not None:
            supplier = await self._resolve_supplier(patch.supplier_id)
            order.supplier = supplier.id
            order.supplier_display_name = supplier.supplier_name
        if patch.items is not None:
            order.items = await self._resolve_lines(patch.items)

        return await self._save(order)

    async def add_line(self, order_id: str, line: LineItemInput) -> PurchaseOrder:
        order = await self._load(order_id)
        order.items.extend(await self._resolve_lines([line]))
        return await self._save(order)

    async def delete(self, order_id: str) -> PurchaseOrder:
        removed = await self.db.purchase_orders.delete(order_id)
        if not removed:
            raise NotFoundError("Purchase order not found")
        logger.info(f"Deleted purchase order {removed.order_no}")
        return removed

    async def get(self, order_id: str) -> PurchaseOrderView:
        order = await self._load(order_id)
        views = await self._to_views([order])
        return views[0]

    async def list(self) -> List[PurchaseOrderView]:
        orders = await self.db.purchase_orders.list(sort=[("orderNo", -1)])
        return await self._to_views(orders)

    async def list_by_supplier(self, supplier_id: str) -> List[PurchaseOrderView]:
        supplier = await self._resolve_supplier(supplier_id)
        orders = await self.db.purchase_orders.find_by_supplier(supplier.id)
        return await self._to_views(orders)

    async def totals(self) -> OrderTotalsSummary:
        result = await self.db.purchase_orders.totals()
        return OrderTotalsSummary(total_amount=result["totalAmount"], count=result["count"])

    async def render_pdf(self, order_id: str) -> bytes:
        return render_order_pdf(await self.get(order_id))

    # Internals

    async def _load(self, order_id: str) -> PurchaseOrder:
        order = await self.db.purchase_orders.get(order_id)
        if not order:
            raise NotFoundError("Purchase order not found")
        return order

    async def _save(self, order: PurchaseOrder) -> PurchaseOrder:
        apply_totals(order)
        order.updated_at = datetime.utcnow()
        saved = await self.db.purchase_orders.replace(order)
        if not saved:
            raise NotFoundError("Purchase order not found")
        logger.info(f"Updated purchase order {order.order_no} (net {order.net_amount})")
        return saved

    async def _resolve_supplier(self, supplier_id: str) -> Supplier:
        supplier = await self.db.suppliers.get(supplier_id)
        if not supplier:
            logger.warning(f"Purchase order references unknown supplier {supplier_id}")
            raise NotFoundError("Supplier not found")
        return supplier

    async def _resolve_lines(self, inputs: Sequence[LineItemInput]) -> List[LineItem]:
        items: Dict[str, Item] = await self.db.items.get_many(line.item_id for line in inputs)

        lines = []
        for line in inputs:
            # get_many keys by canonical lowercase hex
            oid = to_object_id(line.item_id)
            item = items.get(str(oid)) if oid else None
            if not item:
                logger.warning(f"Purchase order references unknown item {line.item_id}")
                raise NotFoundError(f"Item with id {line.item_id} not found")
            unit_price = line.unit_price if line.unit_price is not None else item.unit_price
            lines.append(build_line(
                item_id=item.id,
                order_qty=line.order_qty,
                unit_price=unit_price,
                discount=line.discount,
                packing_unit=line.packing_unit or item.stock_unit,
            ))
        return lines

    async def _to_views(self, orders: Sequence[PurchaseOrder]) -> List[PurchaseOrderView]:
        suppliers = await self.db.suppliers.get_many(o.supplier for o in orders)
        items = await self.db.items.get_many(line.item for o in orders for line in o.items)

        views = []
        for order in orders:
            supplier = suppliers.get(order.supplier)
            views.append(PurchaseOrderView(
                id=order.id,
                order_no=order.order_no,
                order_date=order.order_date,
                supplier=SupplierRef(
                    id=supplier.id,
                    supplier_no=supplier.supplier_no,
                    supplier_name=supplier.supplier_name,
                    address=supplier.address,
                ) if supplier else None,
                supplier_id=order.supplier,
                supplier_display_name=order.supplier_display_name,
                items=[self._line_view(line, items.get(line.item)) for line in order.items],
                item_total=order.item_total,
                discount=order.discount,
                net_amount=order.net_amount,
                total_items=order.total_items,
                created_at=order.created_at,
                updated_at=order.updated_at,
            ))
        return views

    @staticmethod
    def _line_view(line: LineItem, item: Item) -> LineItemView:
        ref = None
        if item:
            ref = ItemRef(id=item.id, item_no=item.item_no, item_name=item.item_name, unit_price=item.unit_price)
        return LineItemView(
            item=ref,
            item_id=line.item,
            packing_unit=line.packing_unit,
            order_qty=line.order_qty,
            unit_price=line.unit_price,
            item_amount=line.item_amount,
            discount=line.discount,
            net_amount=line.net_amount,
        )
