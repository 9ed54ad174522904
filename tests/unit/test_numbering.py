import pytest
from unittest.mock import AsyncMock, MagicMock

from procurement.services.numbering import (
    ITEM_PREFIX,
    ORDER_PREFIX,
    SUPPLIER_PREFIX,
    next_identifier,
    next_number,
)


def test_first_number_starts_at_one():
    assert next_number(ITEM_PREFIX, None) == "ITEM000001"
    assert next_number(ORDER_PREFIX, None) == "PO000001"
    assert next_number(SUPPLIER_PREFIX, None) == "SUP-000001"


def test_next_number_increments_and_pads():
    assert next_number(ITEM_PREFIX, "ITEM000001") == "ITEM000002"
    assert next_number(ORDER_PREFIX, "PO000099") == "PO000100"
    assert next_number(SUPPLIER_PREFIX, "SUP-000041") == "SUP-000042"


def test_next_number_grows_past_padding_width():
    assert next_number(ITEM_PREFIX, "ITEM999999") == "ITEM1000000"


def test_next_number_rejects_foreign_format():
    with pytest.raises(ValueError):
        next_number(ORDER_PREFIX, "INV-0001")


@pytest.mark.asyncio
async def test_next_identifier_uses_highest_existing_number():
    latest = MagicMock()
    latest.model_dump.return_value = {"itemNo": "ITEM000007"}
    repo = MagicMock()
    repo.latest = AsyncMock(return_value=latest)

    number = await next_identifier(repo, "itemNo", ITEM_PREFIX)

    assert number == "ITEM000008"
    field, filter = repo.latest.call_args[0]
    assert field == "itemNo"
    assert filter == {"itemNo": {"$regex": "^ITEM[0-9]+$"}}


@pytest.mark.asyncio
async def test_sequential_items_get_increasing_numbers(make_item):
    # Simulates a collection that sees each created item before the next number is drawn.
    created = []
    repo = MagicMock()
    repo.latest = AsyncMock(side_effect=lambda *args, **kwargs: created[-1] if created else None)

    for _ in range(2):
        number = await next_identifier(repo, "itemNo", ITEM_PREFIX)
        created.append(make_item(item_no=number))

    assert [item.item_no for item in created] == ["ITEM000001", "ITEM000002"]
