from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from procurement.api.auth import get_current_active_user
from procurement.database import Database, get_db
from procurement.models.page import Page
from procurement.models.supplier import Country, Supplier, SupplierCreate, SupplierStatus, SupplierUpdate
from procurement.services.suppliers import SupplierCatalog

router = APIRouter(
    prefix="/api/suppliers",
    tags=["Suppliers"],
    dependencies=[Depends(get_current_active_user)],
)


def get_supplier_catalog(db: Database = Depends(get_db)) -> SupplierCatalog:
    return SupplierCatalog(db)


@router.post("/", response_model=Supplier, status_code=201)
async def create_supplier(payload: SupplierCreate, catalog: SupplierCatalog = Depends(get_supplier_catalog)):
    return await catalog.create(payload)


@router.get("/", response_model=Page[Supplier])
async def list_suppliers(
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    sort: Optional[str] = None,
    supplier_name: Optional[str] = Query(None, alias="supplierName"),
    country: Optional[Country] = None,
    status: Optional[SupplierStatus] = None,
    catalog: SupplierCatalog = Depends(get_supplier_catalog),
):
    return await catalog.list(
        page=page, limit=limit, sort=sort, supplier_name=supplier_name, country=country, status=status,
    )


@router.get("/country/{country}", response_model=List[Supplier])
async def list_suppliers_by_country(country: Country, catalog: SupplierCatalog = Depends(get_supplier_catalog)):
    return await catalog.by_country(country)


@router.get("/{supplier_id}", response_model=Supplier)
async def get_supplier(supplier_id: str, catalog: SupplierCatalog = Depends(get_supplier_catalog)):
    return await catalog.get(supplier_id)


@router.put("/{supplier_id}", response_model=Supplier)
async def update_supplier(
    supplier_id: str,
    patch: SupplierUpdate,
    catalog: SupplierCatalog = Depends(get_supplier_catalog),
):
    return await catalog.update(supplier_id, patch)


@router.patch("/{supplier_id}/activate", response_model=Supplier)
async def activate_supplier(supplier_id: str, catalog: SupplierCatalog = Depends(get_supplier_catalog)):
    return await catalog.activate(supplier_id)


@router.delete("/{supplier_id}", status_code=204)
async def delete_supplier(supplier_id: str, catalog: SupplierCatalog = Depends(get_supplier_catalog)):
    await catalog.delete(supplier_id)
    return Response(status_code=204)
