import math
from typing import Iterable, List, Optional, Tuple

from pymongo import ASCENDING, DESCENDING

from procurement.errors import ValidationError


def parse_sort(sort: Optional[str], allowed: Iterable[str], default: str = "-createdAt") -> List[Tuple[str, int]]:
    """
    Turn ``"unitPrice,-createdAt"`` into a pymongo sort list. A leading ``-``
    means descending; only fields in ``allowed`` are accepted.
    """
    allowed = set(allowed)
    keys = []
    for token in (sort or default).split(","):
        token = token.strip()
        if not token:
            continue
        direction = DESCENDING if token.startswith("-") else ASCENDING
        field = token.lstrip("-+")
        if field not in allowed:
            raise ValidationError(f"Cannot sort by '{field}'")
        keys.append((field, direction))
    return keys


def page_window(page: int, limit: int) -> int:
    """Number of documents to skip for a 1-based page."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
