import pytest
from unittest.mock import AsyncMock, MagicMock

from bson import ObjectId

from procurement.config import Settings
from procurement.models.item import Item
from procurement.models.supplier import Supplier
from procurement.models.user import User
from procurement.services.auth import hash_password


def _new_id() -> str:
    return str(ObjectId())


def _make_supplier(**overrides) -> Supplier:
    data = dict(
        id=_new_id(),
        supplier_no="SUP-000001",
        supplier_name="Office Supplies Co",
        address="1 High Street, London",
        country="United Kingdom",
        tax_no="GB123456789",
        mobile_no="+44 7700 900123",
        email="orders@officesupplies.com",
    )
    data.update(overrides)
    return Supplier(**data)


def _make_item(supplier_id: str = None, **overrides) -> Item:
    data = dict(
        id=_new_id(),
        item_no="ITEM000001",
        item_name="A4 Paper",
        inventory_location="Store A",
        brand="Navigator",
        category="Stationery",
        supplier=supplier_id or _new_id(),
        stock_unit="BOX",
        unit_price=10.0,
    )
    data.update(overrides)
    return Item(**data)


def _make_user(**overrides) -> User:
    data = dict(
        id=_new_id(),
        username="alice",
        email="alice@example.com",
        password_hash=hash_password("correct-horse"),
    )
    data.update(overrides)
    return User(**data)


@pytest.fixture
def test_settings():
    return Settings(
        JWT_SECRET="test-secret",
        JWT_REFRESH_SECRET="test-refresh-secret",
        LOGIN_RATE_LIMIT=5,
        LOGIN_RATE_WINDOW_SECONDS=15 * 60,
    )


@pytest.fixture
def mock_db(test_settings):
    db = MagicMock()
    db.settings = test_settings
    # Repositories
    db.items = AsyncMock()
    db.suppliers = AsyncMock()
    db.purchase_orders = AsyncMock()
    db.users = AsyncMock()
    db.fs = AsyncMock()  # GridFS bucket
    return db


@pytest.fixture
def new_id():
    return _new_id


@pytest.fixture
def make_supplier():
    return _make_supplier


@pytest.fixture
def make_item():
    return _make_item


@pytest.fixture
def make_user():
    return _make_user


@pytest.fixture
def supplier():
    return _make_supplier()


@pytest.fixture
def user():
    return _make_user()
