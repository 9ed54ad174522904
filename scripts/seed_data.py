import asyncio
import os
import sys
sys.path.append(os.getcwd())

from procurement.config import settings
from procurement.database import Database
from procurement.errors import ValidationError
from procurement.models.item import ItemCreate
from procurement.models.purchase_order import LineItemInput, PurchaseOrderCreate
from procurement.models.supplier import SupplierCreate
from procurement.models.user import RegisterRequest
from procurement.services.auth import AuthService
from procurement.services.items import ItemCatalog
from procurement.services.purchase_orders import PurchaseOrderManager
from procurement.services.suppliers import SupplierCatalog

async def seed_db():
    print(f"Connecting to {settings.MONGODB_URL}...")
    db = Database(settings)
    db.connect()

    # 1. Demo user
    print("Seeding user...")
    try:
        await AuthService(db).register(RegisterRequest(
            username="demo", email="demo@example.com", password="demo-password"
        ))
    except ValidationError:
        print("  user 'demo' already exists")

    # 2. Suppliers
    print("Seeding Suppliers...")
    suppliers = SupplierCatalog(db)
    office = await suppliers.create(SupplierCreate(
        supplier_name="Office Supplies Co",
        address="1 High Street, London",
        country="United Kingdom",
        tax_no="GB123456789",
        mobile_no="+44 7700 900123",
        email="orders@officesupplies.com",
    ))
    tech = await suppliers.create(SupplierCreate(
        supplier_name="Tech Gadgets Ltd",
        address="500 Market St, San Francisco",
        country="United States",
        tax_no="94-1234567",
        mobile_no="+1 415 555 0100",
        email="sales@techgadgets.com",
    ))

    # 3. Items
    print("Seeding Items...")
    catalog = ItemCatalog(db)
    paper = await catalog.create(ItemCreate(
        item_name="A4 Paper", inventory_location="Store A", brand="Navigator",
        category="Stationery", supplier=office.id, stock_unit="BOX", unit_price=24.5,
    ))
    pens = await catalog.create(ItemCreate(
        item_name="Ballpoint Pens", inventory_location="Store A", brand="Bic",
        category="Stationery", supplier=office.id, stock_unit="BOX", unit_price=6.0,
    ))
    await catalog.create(ItemCreate(
        item_name="USB-C Hub", inventory_location="Store B", brand="Anker",
        category="Electronics", supplier=tech.id, stock_unit="PCS", unit_price=39.99,
    ))

    # 4. Purchase Order
    print("Seeding Purchase Order...")
    order = await PurchaseOrderManager(db).create(PurchaseOrderCreate(
        supplier_id=office.id,
        items=[
            LineItemInput(item_id=paper.id, order_qty=10, discount=5.0),
            LineItemInput(item_id=pens.id, order_qty=4),
        ],
    ))
    print(f"  {order.order_no}: net {order.net_amount}")

    print("Seeding complete.")
    db.close()

if __name__ == "__main__":
    asyncio.run(seed_db())
