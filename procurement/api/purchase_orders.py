from typing import List

from fastapi import APIRouter, Depends, Response

from procurement.api.auth import get_current_active_user
from procurement.database import Database, get_db
from procurement.models.purchase_order import (
    LineItemInput,
    OrderTotalsSummary,
    PurchaseOrder,
    PurchaseOrderCreate,
    PurchaseOrderUpdate,
    PurchaseOrderView,
)
from procurement.models.user import User
from procurement.services.purchase_orders import PurchaseOrderManager

router = APIRouter(prefix="/api/purchase-order", tags=["Purchase Orders"])


def get_order_manager(db: Database = Depends(get_db)) -> PurchaseOrderManager:
    return PurchaseOrderManager(db)


@router.post("/add", response_model=PurchaseOrder)
async def create_purchase_order(
    payload: PurchaseOrderCreate,
    manager: PurchaseOrderManager = Depends(get_order_manager),
    current_user: User = Depends(get_current_active_user),
):
    return await manager.create(payload)


# Fixed paths are declared before "/{order_id}" so they are not captured by it.
@router.get("/total", response_model=OrderTotalsSummary)
async def get_order_totals(
    manager: PurchaseOrderManager = Depends(get_order_manager),
    current_user: User = Depends(get_current_active_user),
):
    return await manager.totals()


@router.get("/supplier/{supplier_id}", response_model=List[PurchaseOrderView])
async def list_orders_for_supplier(
    supplier_id: str,
    manager: PurchaseOrderManager = Depends(get_order_manager),
    current_user: User = Depends(get_current_active_user),
):
    return await manager.list_by_supplier(supplier_id)


@router.get("/", response_model=List[PurchaseOrderView])
async def list_purchase_orders(manager: PurchaseOrderManager = Depends(get_order_manager)):
    return await manager.list()


@router.get("/{order_id}", response_model=PurchaseOrderView)
async def get_purchase_order(
    order_id: str,
    manager: PurchaseOrderManager = Depends(get_order_manager),
    current_user: User = Depends(get_current_active_user),
):
    return await manager.get(order_id)


@router.get("/{order_id}/pdf")
async def export_purchase_order(
    order_id: str,
    manager: PurchaseOrderManager = Depends(get_order_manager),
    current_user: User = Depends(get_current_active_user),
):
    content = await manager.render_pdf(order_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="purchase-order-{order_id}.pdf"'},
    )


@router.put("/{order_id}", response_model=PurchaseOrder)
async def update_purchase_order(
    order_id: str,
    patch: PurchaseOrderUpdate,
    manager: PurchaseOrderManager = Depends(get_order_manager),
    current_user: User = Depends(get_current_active_user),
):
    return await manager.update(order_id, patch)


@router.post("/{order_id}/items", response_model=PurchaseOrder)
async def add_order_line(
    order_id: str,
    line: LineItemInput,
    manager: PurchaseOrderManager = Depends(get_order_manager),
    current_user: User = Depends(get_current_active_user),
):
    return await manager.add_line(order_id, line)


@router.delete("/{order_id}")
async def delete_purchase_order(
    order_id: str,
    manager: PurchaseOrderManager = Depends(get_order_manager),
    current_user: User = Depends(get_current_active_user),
):
    await manager.delete(order_id)
    return {"message": "Purchase order deleted successfully"}
