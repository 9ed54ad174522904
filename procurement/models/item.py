from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from pydantic import Field, model_validator
from procurement.models.base import CamelModel, MongoModel, PyObjectId


class StockUnit(str, Enum):
    PCS = "PCS"
    BOX = "BOX"
    KG = "KG"
    L = "L"


class ItemStatus(str, Enum):
    ENABLED = "Enabled"
    DISABLED = "Disabled"


class Item(MongoModel):
    """
    Inventory catalog entry. ``item_no`` is assigned once on insert and never changes.
    """
    item_no: str = Field(..., description="Sequential ITEM###### number")
    item_name: str
    inventory_location: str
    brand: str
    category: str
    supplier: PyObjectId

    stock_unit: StockUnit
    unit_price: float = Field(..., ge=0)
    item_images: List[str] = Field(default_factory=list, description="GridFS file ids")
    status: ItemStatus = ItemStatus.ENABLED

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ItemCreate(CamelModel):
    item_name: str = Field(..., min_length=1)
    inventory_location: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    supplier: str = Field(..., min_length=1)
    stock_unit: StockUnit
    unit_price: float = Field(..., ge=0)
    status: ItemStatus = ItemStatus.ENABLED


class ItemUpdate(CamelModel):
    item_name: Optional[str] = Field(None, min_length=1)
    inventory_location: Optional[str] = Field(None, min_length=1)
    brand: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    supplier: Optional[str] = Field(None, min_length=1)
    stock_unit: Optional[StockUnit] = None
    unit_price: Optional[float] = Field(None, ge=0)
    status: Optional[ItemStatus] = None


class BulkOperation(CamelModel):
    type: Literal["create", "update", "delete"]
    id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def check_arguments(self) -> "BulkOperation":
        if self.type in ("update", "delete") and not self.id:
            raise ValueError(f"'{self.type}' operation requires an id")
        if self.type in ("create", "update") and self.data is None:
            raise ValueError(f"'{self.type}' operation requires data")
        return self


class BulkRequest(CamelModel):
    operations: List[BulkOperation] = Field(..., min_length=1)
