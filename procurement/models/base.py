from typing import Annotated, Any, Dict, Optional, Type, TypeVar
from pydantic import BaseModel, BeforeValidator, Field, ConfigDict
from pydantic.alias_generators import to_camel

# Helper to handle ObjectId as string
PyObjectId = Annotated[str, BeforeValidator(str)]

T = TypeVar("T", bound="MongoModel")


class CamelModel(BaseModel):
    """
    Request/response schema using the camelCase wire names of the API.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class MongoModel(CamelModel):
    """
    Base model for MongoDB documents with _id handling and serialization helpers.
    Stored field names are the camelCase aliases.
    """
    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    # merged with CamelModel's config
    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def from_mongo(cls: Type[T], data: Dict[str, Any]) -> Optional[T]:
        """Convert MongoDB document to Pydantic model."""
        if not data:
            return None
        data = dict(data)
        id = data.pop("_id", None)
        return cls(id=id, **data)

    def to_mongo(self, exclude_none: bool = False) -> Dict[str, Any]:
        """Convert Pydantic model to MongoDB document."""
        data = self.model_dump(by_alias=True, exclude_none=exclude_none, exclude=self._computed_fields())
        if data.get("_id") is None:
            data.pop("_id", None)
        return data

    @classmethod
    def _computed_fields(cls) -> set:
        return set(cls.model_computed_fields)
