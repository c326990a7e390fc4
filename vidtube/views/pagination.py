"""Page-window pagination over composed views."""

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.models import Base
from vidtube.errors import InvalidArgument
from vidtube.views.composer import ViewShape, base_query, compose_rows

ACCEPTED_SORT_TYPES = ("asc", "desc")


def _parse_positive_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument("Invalid page & limit passed") from None
    if not math.isfinite(number) or number != int(number):
        raise InvalidArgument("Invalid page & limit passed")
    if number < 1:
        raise InvalidArgument("Page and limit must be at least 1")
    return int(number)


@dataclass(frozen=True)
class PageParams:
    """Validated page window and optional sort."""

    page: int = 1
    limit: int = 10
    sort_by: str | None = None
    sort_type: str | None = None

    @classmethod
    def parse(
        cls,
        page: Any = None,
        limit: Any = None,
        sort_by: str | None = None,
        sort_type: str | None = None,
        default_limit: int = 10,
        max_limit: int | None = None,
    ) -> "PageParams":
        """Build params from raw request values.

        Raises:
            InvalidArgument: For non-numeric or out-of-range page/limit, an
                unknown sort type, or a sort type without a sort field
        """
        parsed_page = _parse_positive_int(page, 1)
        parsed_limit = _parse_positive_int(limit, default_limit)
        if max_limit is not None and parsed_limit > max_limit:
            raise InvalidArgument(f"Limit must be at most {max_limit}")

        if sort_type:
            sort_type = sort_type.lower()
            if sort_type not in ACCEPTED_SORT_TYPES:
                raise InvalidArgument("Unsupported sort type")
            if not sort_by:
                raise InvalidArgument("Sort field missing")
        elif sort_by:
            sort_type = "asc"

        return cls(
            page=parsed_page,
            limit=parsed_limit,
            sort_by=sort_by or None,
            sort_type=sort_type or None,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _order_by(model: type[Base], params: PageParams) -> list:
    # Creation order, then id, keeps the window stable between requests
    natural = [model.created_at.asc(), model.id.asc()]
    if not params.sort_by:
        return natural
    column = model.__table__.columns.get(params.sort_by)
    if column is None:
        raise InvalidArgument("Unsupported sort field")
    ordered = column.desc() if params.sort_type == "desc" else column.asc()
    return [ordered, *natural]


async def paginate(
    db: AsyncSession, stmt: Select, model: type[Base], params: PageParams
) -> dict[str, Any]:
    """Run ``stmt`` as one page window.

    Args:
        db: Database session
        stmt: Unordered select of ``model`` rows
        model: Model selected by ``stmt``, used to resolve the sort column
        params: Page window and sort

    Returns:
        A dict with:
            - "items": Rows of the window in sort order
            - "page", "limit": The window requested
            - "total_items": Count over the whole matched set
            - "total_pages": Number of non-empty pages
    """
    order_by = _order_by(model, params)

    total_items = (
        await db.execute(select(func.count()).select_from(stmt.order_by(None).subquery()))
    ).scalar_one()

    items = []
    # A window past the last row is empty; never send its offset to the store
    if params.offset < total_items:
        window = min(params.limit, total_items - params.offset)
        result = await db.execute(
            stmt.order_by(*order_by).offset(params.offset).limit(window)
        )
        items = list(result.scalars().all())

    return {
        "items": items,
        "page": params.page,
        "limit": params.limit,
        "total_items": total_items,
        "total_pages": math.ceil(total_items / params.limit),
    }


async def compose_page(
    db: AsyncSession, shape: ViewShape, match: dict[str, Any], params: PageParams
) -> dict[str, Any]:
    """Paginate the base rows of ``shape`` and compose only the window."""
    page = await paginate(db, base_query(shape, match), shape.model, params)
    page["items"] = await compose_rows(db, page["items"], shape)
    return page
