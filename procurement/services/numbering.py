import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClientSession

from procurement.repositories.base import BaseRepository

ITEM_PREFIX = "ITEM"
SUPPLIER_PREFIX = "SUP-"
ORDER_PREFIX = "PO"
NUMBER_WIDTH = 6


def next_number(prefix: str, last: Optional[str] = None, width: int = NUMBER_WIDTH) -> str:
    """
    Return the number following ``last``: ``prefix`` plus the incremented,
    zero-padded numeric suffix. With no previous number the sequence starts at 1.
    """
    current = 0
    if last:
        suffix = last[len(prefix):]
        if not last.startswith(prefix) or not suffix.isdigit():
            raise ValueError(f"{last!r} is not a {prefix} number")
        current = int(suffix)
    return f"{prefix}{str(current + 1).zfill(width)}"


async def next_identifier(
    repository: BaseRepository,
    field: str,
    prefix: str,
    session: AsyncIOMotorClientSession = None,
) -> str:
    """
    Derive the next number for a collection from its highest existing one.

    Not atomic: two concurrent callers can get the same value, in which case
    the unique index on ``field`` rejects the second insert.
    """
    pattern = f"^{re.escape(prefix)}[0-9]+$"
    latest = await repository.latest(field, {field: {"$regex": pattern}}, session=session)
    last = latest.model_dump(by_alias=True)[field] if latest else None
    return next_number(prefix, last)
