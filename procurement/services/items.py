import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pydantic
from bson import ObjectId
from fastapi import UploadFile
from gridfs.errors import NoFile
from motor.motor_asyncio import AsyncIOMotorClientSession
from pydantic import BaseModel

from procurement.database import Database
from procurement.errors import NotFoundError, ValidationError
from procurement.models.item import BulkOperation, Item, ItemCreate, ItemStatus, ItemUpdate
from procurement.models.page import Page
from procurement.services.numbering import ITEM_PREFIX, next_identifier
from procurement.services.query import page_window, parse_sort, total_pages

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {"itemNo", "itemName", "brand", "category", "unitPrice", "status", "createdAt", "updatedAt"}


class BulkResult(BaseModel):
    type: str
    item: Item


class ItemCatalog:
    def __init__(self, db: Database):
        self.db = db

    async def create(self, payload: ItemCreate, session: AsyncIOMotorClientSession = None) -> Item:
        supplier_id = await self._check_supplier(payload.supplier, session)
        data = payload.model_dump()
        data["supplier"] = supplier_id

        item = Item(
            item_no=await next_identifier(self.db.items, "itemNo", ITEM_PREFIX, session=session),
            **data,
        )
        await self.db.items.create(item, session=session)
        logger.info(f"Created item {item.item_no} ({item.item_name})")
        return item

    async def list(
        self,
        page: int = 1,
        limit: int = 10,
        sort: Optional[str] = None,
        name: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        category: Optional[str] = None,
        status: Optional[ItemStatus] = None,
    ) -> Page[Item]:
        query: Dict[str, Any] = {}
        if name:
            query["itemName"] = {"$regex": re.escape(name), "$options": "i"}
        if min_price is not None or max_price is not None:
            query["unitPrice"] = {}
            if min_price is not None:
                query["unitPrice"]["$gte"] = min_price
            if max_price is not None:
                query["unitPrice"]["$lte"] = max_price
        if category:
            query["category"] = category
        if status:
            query["status"] = ItemStatus(status).value

        items = await self.db.items.list(
            query,
            skip=page_window(page, limit),
            limit=limit,
            sort=parse_sort(sort, SORTABLE_FIELDS),
        )
        total = await self.db.items.count(query)
        return Page[Item](data=items, current_page=page, total_pages=total_pages(total, limit), total_items=total)

    async def get(self, item_id: str, session: AsyncIOMotorClientSession = None) -> Item:
        item = await self.db.items.get(item_id, session=session)
        if not item:
            raise NotFoundError(f"No item found with id {item_id}")
        return item

    async def update(self, item_id: str, patch: ItemUpdate, session: AsyncIOMotorClientSession = None) -> Item:
        changes = patch.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        if not changes:
            return await self.get(item_id, session=session)
        if "supplier" in changes:
            changes["supplier"] = await self._check_supplier(changes["supplier"], session)
        changes["updatedAt"] = datetime.utcnow()

        item = await self.db.items.update(item_id, changes, session=session)
        if not item:
            raise NotFoundError(f"No item found with id {item_id}")
        return item

    async def delete(self, item_id: str) -> Item:
        item = await self._delete_document(item_id)
        await self._purge_images(item.item_images)
        return item

    async def bulk(self, operations: List[BulkOperation]) -> List[BulkResult]:
        """
        Apply create/update/delete operations in one transaction. Any failing
        operation aborts the whole batch.
        """
        results = []
        async with await self.db.start_session() as session:
            async with session.start_transaction():
                for index, op in enumerate(operations):
                    results.append(await self._apply(index, op, session))

        for result in results:
            if result.type == "delete":
                await self._purge_images(result.item.item_images)
        logger.info(f"Bulk item operations committed: {len(results)}")
        return results

    async def attach_images(self, item_id: str, files: List[UploadFile]) -> Item:
        item = await self.get(item_id)
        settings = self.db.settings

        if not files:
            raise ValidationError("No files uploaded")
        if len(files) + len(item.item_images) > settings.MAX_IMAGE_FILES:
            raise ValidationError(f"An item can have at most {settings.MAX_IMAGE_FILES} images")

        uploads: List[Tuple[str, str, bytes]] = []
        for file in files:
            content_type = file.content_type or ""
            if not content_type.startswith("image/"):
                raise ValidationError(f"{file.filename}: only image files are allowed")
            content = await file.read(settings.MAX_IMAGE_BYTES + 1)
            if len(content) > settings.MAX_IMAGE_BYTES:
                raise ValidationError(f"{file.filename}: file exceeds {settings.MAX_IMAGE_BYTES} bytes")
            uploads.append((file.filename or "image", content_type, content))

        file_ids = []
        for filename, content_type, content in uploads:
            file_id = await self.db.fs.upload_from_stream(
                filename,
                content,
                metadata={"contentType": content_type, "item": item.id},
            )
            file_ids.append(str(file_id))

        updated = await self.db.items.add_images(item.id, file_ids)
        if not updated:
            # item removed while uploading
            await self._purge_images(file_ids)
            raise NotFoundError(f"No item found with id {item_id}")
        logger.info(f"Attached {len(file_ids)} image(s) to item {item.item_no}")
        return updated

    async def open_image(self, file_id: str) -> Tuple[bytes, str]:
        if not ObjectId.is_valid(file_id):
            raise NotFoundError("Image not found")
        try:
            stream = await self.db.fs.open_download_stream(ObjectId(file_id))
        except NoFile:
            raise NotFoundError("Image not found")
        content = await stream.read()
        metadata = stream.metadata or {}
        return content, metadata.get("contentType", "application/octet-stream")

    async def detach_image(self, item_id: str, file_id: str) -> Item:
        item = await self.get(item_id)
        if file_id not in item.item_images:
            raise NotFoundError("Image not found")
        updated = await self.db.items.remove_image(item.id, file_id)
        await self._purge_images([file_id])
        return updated

    # Internals

    async def _apply(self, index: int, op: BulkOperation, session: AsyncIOMotorClientSession) -> BulkResult:
        try:
            if op.type == "create":
                item = await self.create(ItemCreate.model_validate(op.data), session=session)
            elif op.type == "update":
                item = await self.update(op.id, ItemUpdate.model_validate(op.data), session=session)
            else:
                item = await self._delete_document(op.id, session=session)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Operation {index}: {e.errors()[0]['msg']}")
        return BulkResult(type=op.type, item=item)

    async def _delete_document(self, item_id: str, session: AsyncIOMotorClientSession = None) -> Item:
        item = await self.db.items.delete(item_id, session=session)
        if not item:
            raise NotFoundError(f"No item found with id {item_id}")
        logger.info(f"Deleted item {item.item_no}")
        return item

    async def _purge_images(self, file_ids: List[str]):
        for file_id in file_ids:
            try:
                await self.db.fs.delete(ObjectId(file_id))
            except NoFile:
                logger.warning(f"Image {file_id} already missing from storage")

    async def _check_supplier(self, supplier_id: str, session: AsyncIOMotorClientSession = None) -> str:
        supplier = await self.db.suppliers.get(supplier_id, session=session)
        if not supplier:
            raise NotFoundError("Supplier not found")
        return supplier.id
