from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, Field, computed_field
from procurement.models.base import CamelModel, MongoModel, PyObjectId
from procurement.models.item import StockUnit


class LineItem(CamelModel):
    """
    One ordered quantity of a catalog item. Price fields are a snapshot taken
    when the line was resolved; later catalog price changes do not touch it.
    """
    item: PyObjectId
    packing_unit: Optional[StockUnit] = None
    order_qty: int = Field(..., ge=1)
    unit_price: float = Field(..., ge=0)
    item_amount: float
    discount: float = Field(0.0, ge=0)
    net_amount: float


class PurchaseOrder(MongoModel):
    """
    Purchase order document. ``item_total``, ``discount`` and ``net_amount``
    always equal the sums over ``items``; they are rewritten on every save.
    """
    order_no: str = Field(..., description="Sequential PO###### number")
    order_date: datetime = Field(default_factory=datetime.utcnow)

    supplier: PyObjectId
    supplier_display_name: str

    items: List[LineItem] = Field(default_factory=list)

    item_total: float = Field(0.0, ge=0)
    discount: float = Field(0.0, ge=0)
    net_amount: float = Field(0.0, ge=0)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @computed_field
    @property
    def total_items(self) -> int:
        return sum(line.order_qty for line in self.items)


# Request schemas

class LineItemInput(CamelModel):
    """
    Line as submitted by a client. Amount fields sent by the client are
    accepted for compatibility but ignored; they are recomputed server-side.
    """
    item_id: str = Field(..., min_length=1, validation_alias=AliasChoices("itemId", "item", "item_id"))
    packing_unit: Optional[StockUnit] = None
    order_qty: int = Field(..., ge=1)
    unit_price: Optional[float] = Field(None, ge=0)
    discount: float = Field(0.0, ge=0)
    item_amount: Optional[float] = None
    net_amount: Optional[float] = None


class PurchaseOrderCreate(CamelModel):
    supplier_id: str = Field(..., min_length=1)
    items: List[LineItemInput] = Field(..., min_length=1)
    order_date: Optional[datetime] = None


class PurchaseOrderUpdate(CamelModel):
    supplier_id: Optional[str] = Field(None, min_length=1)
    items: Optional[List[LineItemInput]] = Field(None, min_length=1)
    order_date: Optional[datetime] = None


class OrderTotalsSummary(CamelModel):
    total_amount: float = 0.0
    count: int = 0


# Read views with references resolved

class SupplierRef(CamelModel):
    id: PyObjectId = Field(..., alias="_id")
    supplier_no: str
    supplier_name: str
    address: Optional[str] = None


class ItemRef(CamelModel):
    id: PyObjectId = Field(..., alias="_id")
    item_no: str
    item_name: str
    unit_price: float


class LineItemView(LineItem):
    item: Optional[ItemRef] = None  # type: ignore[assignment]
    item_id: PyObjectId


class PurchaseOrderView(CamelModel):
    id: PyObjectId = Field(..., alias="_id")
    order_no: str
    order_date: datetime
    supplier: Optional[SupplierRef] = None
    supplier_id: PyObjectId
    supplier_display_name: str
    items: List[LineItemView] = Field(default_factory=list)
    item_total: float
    discount: float
    net_amount: float
    total_items: int
    created_at: datetime
    updated_at: datetime
