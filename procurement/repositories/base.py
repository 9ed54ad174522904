from typing import Generic, TypeVar, Any, Dict, Iterable, List, Optional, Sequence, Tuple
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorCollection
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.collation import Collation
from procurement.models.base import MongoModel

T = TypeVar("T", bound=MongoModel)

SortSpec = Sequence[Tuple[str, int]]

# Digit runs compare as numbers: "ITEM1000000" sorts above "ITEM999999".
NUMERIC_ORDER = Collation(locale="en", numericOrdering=True)


def to_object_id(id: str) -> Optional[ObjectId]:
    """Parse a hex id; malformed ids yield None so callers can treat them as missing."""
    if isinstance(id, ObjectId):
        return id
    if not id or not ObjectId.is_valid(id):
        return None
    return ObjectId(id)


class BaseRepository(Generic[T]):
    def __init__(self, collection: AsyncIOMotorCollection, model_cls: type[T]):
        self.collection = collection
        self.model_cls = model_cls

    async def get(self, id: str, session: AsyncIOMotorClientSession = None) -> Optional[T]:
        """Get a document by ID."""
        oid = to_object_id(id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid}, session=session)
        return self.model_cls.from_mongo(doc) if doc else None

    async def get_many(self, ids: Iterable[str]) -> Dict[str, T]:
        """Fetch several documents by ID, keyed by their string ID."""
        oids = [oid for oid in (to_object_id(i) for i in set(ids)) if oid is not None]
        if not oids:
            return {}
        cursor = self.collection.find({"_id": {"$in": oids}})
        docs = await cursor.to_list(length=len(oids))
        return {str(doc["_id"]): self.model_cls.from_mongo(doc) for doc in docs}

    async def get_by_field(self, field: str, value: Any) -> Optional[T]:
        """Get a document by a specific field."""
        doc = await self.collection.find_one({field: value})
        return self.model_cls.from_mongo(doc) if doc else None

    async def list(
        self,
        filter: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 0,
        sort: Optional[SortSpec] = None,
    ) -> List[T]:
        """List documents with optional filter, sort and pagination. ``limit=0`` means no limit."""
        cursor = self.collection.find(filter or {})
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=limit or None)
        return [self.model_cls.from_mongo(doc) for doc in docs]

    async def latest(self, field: str, filter: Optional[Dict[str, Any]] = None,
                     session: AsyncIOMotorClientSession = None) -> Optional[T]:
        """Return the document with the highest value of ``field``, digit runs compared numerically."""
        doc = await self.collection.find_one(
            filter or {}, sort=[(field, DESCENDING)], collation=NUMERIC_ORDER, session=session
        )
        return self.model_cls.from_mongo(doc) if doc else None

    async def create(self, model: T, session: AsyncIOMotorClientSession = None) -> T:
        """Create a new document."""
        data = model.to_mongo()
        result = await self.collection.insert_one(data, session=session)
        model.id = str(result.inserted_id)
        return model

    async def update(self, id: str, update_data: Dict[str, Any],
                     session: AsyncIOMotorClientSession = None) -> Optional[T]:
        """Partially update a document by ID and return the new version, or None if absent."""
        oid = to_object_id(id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
            session=session,
        )
        return self.model_cls.from_mongo(doc) if doc else None

    async def replace(self, model: T, session: AsyncIOMotorClientSession = None) -> Optional[T]:
        """Overwrite a whole document with the model's current state."""
        oid = to_object_id(model.id)
        if oid is None:
            return None
        data = model.to_mongo()
        data.pop("_id", None)
        result = await self.collection.replace_one({"_id": oid}, data, session=session)
        return model if result.matched_count else None

    async def delete(self, id: str, session: AsyncIOMotorClientSession = None) -> Optional[T]:
        """Delete a document by ID, returning what was removed."""
        oid = to_object_id(id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_delete({"_id": oid}, session=session)
        return self.model_cls.from_mongo(doc) if doc else None

    async def count(self, filter: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching a filter."""
        return await self.collection.count_documents(filter or {})

    async def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        cursor = self.collection.aggregate(pipeline)
        return await cursor.to_list(length=None)
