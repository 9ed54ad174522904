from typing import List, Optional
from pymongo import ReturnDocument
from procurement.repositories.base import BaseRepository, to_object_id
from procurement.models.item import Item

class ItemRepository(BaseRepository[Item]):
    async def add_images(self, id: str, file_ids: List[str]) -> Optional[Item]:
        """Append GridFS file ids to an item's image list."""
        return await self._modify_images(id, {"$push": {"itemImages": {"$each": file_ids}}})

    async def remove_image(self, id: str, file_id: str) -> Optional[Item]:
        """Detach one GridFS file id from an item's image list."""
        return await self._modify_images(id, {"$pull": {"itemImages": file_id}})

    async def _modify_images(self, id: str, update: dict) -> Optional[Item]:
        oid = to_object_id(id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid}, update, return_document=ReturnDocument.AFTER
        )
        return self.model_cls.from_mongo(doc) if doc else None
