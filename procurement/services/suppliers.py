import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from procurement.database import Database
from procurement.errors import NotFoundError
from procurement.models.page import Page
from procurement.models.supplier import Country, Supplier, SupplierCreate, SupplierStatus, SupplierUpdate
from procurement.services.numbering import SUPPLIER_PREFIX, next_identifier
from procurement.services.query import page_window, parse_sort, total_pages

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {"supplierNo", "supplierName", "country", "status", "createdAt", "updatedAt"}


class SupplierCatalog:
    def __init__(self, db: Database):
        self.db = db

    async def create(self, payload: SupplierCreate) -> Supplier:
        supplier = Supplier(
            supplier_no=await next_identifier(self.db.suppliers, "supplierNo", SUPPLIER_PREFIX),
            **payload.model_dump(),
        )
        await self.db.suppliers.create(supplier)
        logger.info(f"Created supplier {supplier.supplier_no} ({supplier.supplier_name})")
        return supplier

    async def list(
        self,
        page: int = 1,
        limit: int = 100,
        sort: Optional[str] = None,
        supplier_name: Optional[str] = None,
        country: Optional[Country] = None,
        status: Optional[SupplierStatus] = None,
    ) -> Page[Supplier]:
        query: Dict[str, Any] = {}
        if supplier_name:
            query["supplierName"] = {"$regex": re.escape(supplier_name), "$options": "i"}
        if country:
            query["country"] = Country(country).value
        if status:
            query["status"] = SupplierStatus(status).value

        suppliers = await self.db.suppliers.list(
            query,
            skip=page_window(page, limit),
            limit=limit,
            sort=parse_sort(sort, SORTABLE_FIELDS),
        )
        total = await self.db.suppliers.count(query)
        return Page[Supplier](
            data=suppliers, current_page=page, total_pages=total_pages(total, limit), total_items=total
        )

    async def get(self, supplier_id: str) -> Supplier:
        supplier = await self.db.suppliers.get(supplier_id)
        if not supplier:
            raise NotFoundError("No supplier found with that ID")
        return supplier

    async def update(self, supplier_id: str, patch: SupplierUpdate) -> Supplier:
        changes = patch.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        if not changes:
            return await self.get(supplier_id)
        return await self._apply_changes(supplier_id, changes)

    async def delete(self, supplier_id: str) -> Supplier:
        supplier = await self.db.suppliers.delete(supplier_id)
        if not supplier:
            raise NotFoundError("No supplier found with that ID")
        logger.info(f"Deleted supplier {supplier.supplier_no}")
        return supplier

    async def by_country(self, country: Country) -> List[Supplier]:
        return await self.db.suppliers.find_by_country(Country(country).value)

    async def activate(self, supplier_id: str) -> Supplier:
        return await self._apply_changes(supplier_id, {"status": SupplierStatus.ACTIVE.value})

    async def _apply_changes(self, supplier_id: str, changes: Dict[str, Any]) -> Supplier:
        changes["updatedAt"] = datetime.utcnow()
        supplier = await self.db.suppliers.update(supplier_id, changes)
        if not supplier:
            raise NotFoundError("No supplier found with that ID")
        return supplier
