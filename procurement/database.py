import logging
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorGridFSBucket
from procurement.config import Settings
from procurement.repositories.item import ItemRepository
from procurement.repositories.supplier import SupplierRepository
from procurement.repositories.purchase_order import PurchaseOrderRepository
from procurement.repositories.user import UserRepository
from procurement.models.item import Item
from procurement.models.supplier import Supplier
from procurement.models.purchase_order import PurchaseOrder
from procurement.models.user import User

logger = logging.getLogger(__name__)


class Database:
    """
    Data-access handle. Built once at startup and handed to request
    handlers through the ``get_db`` dependency.
    """
    client: AsyncIOMotorClient = None
    fs: AsyncIOMotorGridFSBucket = None

    # Repositories
    items: ItemRepository = None
    suppliers: SupplierRepository = None
    purchase_orders: PurchaseOrderRepository = None
    users: UserRepository = None

    def __init__(self, settings: Settings):
        self.settings = settings

    def connect(self):
        """Initialize database connection and repositories."""
        self.client = AsyncIOMotorClient(self.settings.MONGODB_URL)
        db = self.client[self.settings.DB_NAME]
        self.fs = AsyncIOMotorGridFSBucket(db, bucket_name="item_images")

        self.items = ItemRepository(db.items, Item)
        self.suppliers = SupplierRepository(db.suppliers, Supplier)
        self.purchase_orders = PurchaseOrderRepository(db.purchase_orders, PurchaseOrder)
        self.users = UserRepository(db.users, User)

        logger.info("Connected to MongoDB database '%s'", self.settings.DB_NAME)

    def close(self):
        """Close database connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def start_session(self):
        return await self.client.start_session()


async def get_db(request: Request) -> Database:
    """Dependency for FastAPI."""
    return request.app.state.db
