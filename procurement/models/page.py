from typing import Generic, List, TypeVar
from procurement.models.base import CamelModel

T = TypeVar("T")


class Page(CamelModel, Generic[T]):
    data: List[T]
    current_page: int
    total_pages: int
    total_items: int
