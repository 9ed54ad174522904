from procurement.models.base import MongoModel, CamelModel
from procurement.models.item import Item, ItemCreate, ItemUpdate, ItemStatus, StockUnit, BulkOperation, BulkRequest
from procurement.models.supplier import Supplier, SupplierCreate, SupplierUpdate, SupplierStatus, Country
from procurement.models.purchase_order import (
    LineItem, LineItemInput, PurchaseOrder, PurchaseOrderCreate, PurchaseOrderUpdate,
    PurchaseOrderView, OrderTotalsSummary,
)
from procurement.models.user import User, UserPublic, Role
