"""
Pagination helpers shared by the listing endpoints.

The contract mirrors what the mobile client sends and expects:
page and limit come from the query string, page is floored to 1,
limit falls back to the configured default when absent, non-numeric
or not positive, and the response carries page/limit/total/pages.
"""
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

DEFAULT_LIMIT = 250

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def parse_int(value: Any) -> Optional[int]:
    """
    Parse the leading integer of a query value.

    Examples:
        parse_int("2") -> 2
        parse_int("2abc") -> 2
        parse_int("abc") -> None
        parse_int(None) -> None
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


class PageRequest:
    """Requested page number and page size."""

    def __init__(self, page: int, limit: int):
        self.page = page
        self.limit = limit

    def __repr__(self):
        return f"<PageRequest(page={self.page}, limit={self.limit})>"

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args: Mapping[str, Any], default_limit: int = DEFAULT_LIMIT) -> 'PageRequest':
        """Build a page request from query-string arguments."""
        page = parse_int(args.get('page'))
        limit = parse_int(args.get('limit'))

        page = max(1, page or 1)
        if not limit or limit < 1:
            limit = default_limit

        return cls(page=page, limit=limit)

    def meta(self, total: int) -> Dict[str, int]:
        """Pagination envelope for a result set of `total` records."""
        return {
            'page': self.page,
            'limit': self.limit,
            'total': total,
            'pages': math.ceil(total / self.limit),
        }


def paginate(query, page_request: PageRequest) -> Tuple[List[Any], int]:
    """
    Apply offset/limit to an ordered SQLAlchemy query.

    Args:
        query: SQLAlchemy Query, already filtered and ordered
        page_request: PageRequest with page and limit

    Returns:
        Tuple of (records on the requested page, total matching records)
    """
    total = query.order_by(None).count()
    items = query.offset(page_request.skip).limit(page_request.limit).all()
    return items, total
