# =============================================================================
# tests/test_pagination.py - Cursor Pagination Tests
# =============================================================================
# Walks supplies page by page through lib.pagination.paginate against the
# in-memory database.
# =============================================================================

import pytest

from lib.pagination import paginate


@pytest.fixture
def supplies(fake_db, account):
    """25 supplies, inserted oldest first (supply-0 is the oldest)."""
    return [
        fake_db.add_row("supplies", {
            "id": f"supply-{i}",
            "account_id": account["id"],
            "name": f"Supply {i}",
            "cost": i,
        })
        for i in range(25)
    ]


class TestPaginate:

    def test_first_page(self, supplies, account):
        page = paginate("supplies", account["id"], page_size=10)

        assert [row["id"] for row in page.items] == [f"supply-{i}" for i in range(24, 14, -1)]
        assert page.has_more
        assert page.next_cursor == "supply-15"
        assert page.total == 25

    def test_walks_all_pages_without_gaps(self, supplies, account):
        seen = []
        cursor = None
        pages = 0
        while True:
            page = paginate("supplies", account["id"], page_size=10, cursor=cursor)
            seen += [row["id"] for row in page.items]
            pages += 1
            if not page.has_more:
                break
            cursor = page.next_cursor

        assert pages == 3
        assert len(seen) == 25
        assert len(set(seen)) == 25
        assert page.next_cursor is None

    def test_exact_multiple_has_no_empty_last_page(self, fake_db, account):
        for i in range(10):
            fake_db.add_row("supplies", {"account_id": account["id"], "name": f"S{i}", "cost": 1})

        page = paginate("supplies", account["id"], page_size=10)

        assert len(page.items) == 10
        assert not page.has_more
        assert page.next_cursor is None

    def test_empty_table(self, fake_db, account):
        page = paginate("supplies", account["id"], page_size=5)

        assert page.items == []
        assert not page.has_more
        assert page.total == 0

    def test_unknown_cursor_starts_over(self, supplies, account):
        page = paginate("supplies", account["id"], page_size=5, cursor="does-not-exist")
        assert page.items[0]["id"] == "supply-24"

    def test_cursor_from_other_account_is_ignored(self, supplies, account, fake_db, other_account):
        foreign = fake_db.add_row("supplies", {"account_id": other_account["id"], "name": "X", "cost": 1})

        page = paginate("supplies", account["id"], page_size=5, cursor=foreign["id"])

        assert page.items[0]["id"] == "supply-24"

    def test_only_own_rows(self, supplies, account, fake_db, other_account):
        fake_db.add_row("supplies", {"account_id": other_account["id"], "name": "X", "cost": 1})

        page = paginate("supplies", account["id"], page_size=100)

        assert page.total == 25
        assert all(row["account_id"] == account["id"] for row in page.items)

    def test_rejects_page_size_below_one(self, fake_db, account):
        with pytest.raises(ValueError):
            paginate("supplies", account["id"], page_size=0)
