from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from procurement.api.auth import get_current_active_user
from procurement.database import Database, get_db
from procurement.models.item import BulkRequest, Item, ItemCreate, ItemStatus, ItemUpdate
from procurement.models.page import Page
from procurement.models.user import User
from procurement.services.items import BulkResult, ItemCatalog

router = APIRouter(prefix="/api/items", tags=["Items"])


def get_item_catalog(db: Database = Depends(get_db)) -> ItemCatalog:
    return ItemCatalog(db)


@router.get("/", response_model=Page[Item])
async def list_items(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort: Optional[str] = None,
    name: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    category: Optional[str] = None,
    status: Optional[ItemStatus] = None,
    catalog: ItemCatalog = Depends(get_item_catalog),
):
    return await catalog.list(
        page=page, limit=limit, sort=sort, name=name,
        min_price=min_price, max_price=max_price, category=category, status=status,
    )


@router.get("/images/{file_id}")
async def get_item_image(file_id: str, catalog: ItemCatalog = Depends(get_item_catalog)):
    content, content_type = await catalog.open_image(file_id)
    return Response(content=content, media_type=content_type)


@router.get("/{item_id}", response_model=Item)
async def get_item(item_id: str, catalog: ItemCatalog = Depends(get_item_catalog)):
    return await catalog.get(item_id)


@router.post("/", response_model=Item, status_code=201)
async def create_item(
    payload: ItemCreate,
    catalog: ItemCatalog = Depends(get_item_catalog),
    current_user: User = Depends(get_current_active_user),
):
    return await catalog.create(payload)


@router.post("/bulk", response_model=List[BulkResult])
async def bulk_item_operations(
    payload: BulkRequest,
    catalog: ItemCatalog = Depends(get_item_catalog),
    current_user: User = Depends(get_current_active_user),
):
    return await catalog.bulk(payload.operations)


@router.put("/{item_id}", response_model=Item)
async def update_item(
    item_id: str,
    patch: ItemUpdate,
    catalog: ItemCatalog = Depends(get_item_catalog),
    current_user: User = Depends(get_current_active_user),
):
    return await catalog.update(item_id, patch)


@router.delete("/{item_id}")
async def delete_item(
    item_id: str,
    catalog: ItemCatalog = Depends(get_item_catalog),
    current_user: User = Depends(get_current_active_user),
):
    await catalog.delete(item_id)
    return {"message": "Item deleted successfully"}


@router.post("/{item_id}/images", response_model=Item)
async def upload_item_images(
    item_id: str,
    files: List[UploadFile] = File(...),
    catalog: ItemCatalog = Depends(get_item_catalog),
    current_user: User = Depends(get_current_active_user),
):
    return await catalog.attach_images(item_id, files)


@router.delete("/{item_id}/images/{file_id}", response_model=Item)
async def delete_item_image(
    item_id: str,
    file_id: str,
    catalog: ItemCatalog = Depends(get_item_catalog),
    current_user: User = Depends(get_current_active_user),
):
    return await catalog.detach_image(item_id, file_id)
