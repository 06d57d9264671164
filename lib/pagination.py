# =============================================================================
# lib/pagination.py - Cursor Pagination
# =============================================================================
# Standard "fetch N+1, trim" cursor pagination over an account-scoped table.
#
# The cursor is the id of the last item of the previous page. Rows are ordered
# newest first; the next page starts strictly after the cursor row's
# created_at. A cursor that does not exist (or belongs to another account)
# is ignored and the first page is returned.
#
# Usage:
#   page = paginate("supplies", account_id, page_size=10, cursor=None)
#   page.items, page.has_more, page.next_cursor, page.total
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """One page of results."""
    items: list[dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None
    total: int = 0


def paginate(
    table: str,
    account_id: str,
    page_size: int,
    cursor: str | None = None,
    order_by: str = "created_at",
) -> Page:
    """
    Fetch one page of an account's rows.

    Args:
        table: Table name (must have account_id and the order_by column)
        account_id: Tenant to scope the query to
        page_size: Number of items per page (>= 1)
        cursor: Id of the last item of the previous page
        order_by: Timestamp column used for ordering (newest first)

    Returns:
        Page with items trimmed to page_size

    Raises:
        ValueError: If page_size is less than 1
        SupabaseClientError: If the query fails
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    total = SupabaseClient.count_rows(table, {"account_id": account_id})

    client = SupabaseClient.get_client()
    query = (
        client.table(table)
        .select("*")
        .eq("account_id", account_id)
    )

    if cursor:
        cursor_row = SupabaseClient.fetch_row(table, cursor)
        if cursor_row and cursor_row.get("account_id") == account_id:
            query = query.lt(order_by, cursor_row[order_by])
        else:
            logger.debug(f"Ignoring unknown cursor {cursor} for {table}")

    query = query.order(order_by, desc=True).limit(page_size + 1)

    try:
        response = query.execute()
    except Exception as e:
        raise SupabaseClientError(
            message=f"Failed to paginate {table}: {e}",
            code="PAGINATE_FAILED",
            details={"table": table, "cursor": cursor},
        )

    rows = response.data or []
    items = rows[:page_size]
    has_more = len(rows) > page_size

    return Page(
        items=items,
        has_more=has_more,
        next_cursor=items[-1]["id"] if has_more and items else None,
        total=total,
    )
