from typing import List
from procurement.repositories.base import BaseRepository
from procurement.models.purchase_order import PurchaseOrder

class PurchaseOrderRepository(BaseRepository[PurchaseOrder]):
    async def find_by_supplier(self, supplier_id: str) -> List[PurchaseOrder]:
        return await self.list({"supplier": supplier_id}, sort=[("orderNo", -1)])

    async def totals(self) -> dict:
        """Sum of net amounts and number of orders across the collection."""
        pipeline = [
            {"$group": {
                "_id": None,
                "totalAmount": {"$sum": "$netAmount"},
                "count": {"$sum": 1}
            }}
        ]
        results = await self.aggregate(pipeline)
        if not results:
            return {"totalAmount": 0.0, "count": 0}
        return {"totalAmount": results[0]["totalAmount"], "count": results[0]["count"]}
