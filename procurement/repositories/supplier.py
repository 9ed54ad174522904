from typing import List
from procurement.repositories.base import BaseRepository
from procurement.models.supplier import Supplier

class SupplierRepository(BaseRepository[Supplier]):
    async def find_by_country(self, country: str) -> List[Supplier]:
        return await self.list({"country": country}, sort=[("supplierName", 1)])
