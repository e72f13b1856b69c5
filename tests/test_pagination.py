"""
Tests for client-side paging — finance_tracker/pagination.py
"""

import math

import pytest

from finance_tracker.pagination import ITEMS_PER_PAGE, Paginator
from finance_tracker.records import CategoryListController


class TestPaginator:
    @pytest.mark.parametrize("n", [0, 1, 9, 10, 11, 20, 95, 100, 101])
    def test_total_pages(self, n):
        assert Paginator().total_pages(n) == math.ceil(n / ITEMS_PER_PAGE)

    @pytest.mark.parametrize("n", [1, 10, 25, 100])
    def test_out_of_range_ignored(self, n):
        p = Paginator()
        total = p.total_pages(n)
        assert p.go_to(0, n) is False
        assert p.go_to(total + 1, n) is False
        assert p.current_page == 1

    def test_empty_collection_stays_on_first_page(self):
        p = Paginator()
        assert p.go_to(1, 0) is False
        assert p.current_page == 1

    def test_navigate_and_slice(self):
        items = list(range(25))
        p = Paginator()
        assert p.go_to(3, len(items)) is True
        assert p.page_slice(items) == [20, 21, 22, 23, 24]
        assert p.row_number(0) == 21
        assert p.has_previous() is True
        assert p.has_next(len(items)) is False

    def test_out_of_range_keeps_current(self):
        p = Paginator()
        p.go_to(2, 25)
        p.go_to(4, 25)
        p.go_to(-1, 25)
        assert p.current_page == 2

    def test_first_page(self):
        p = Paginator()
        assert p.page_slice(list(range(15))) == list(range(10))
        assert p.has_previous() is False
        assert p.has_next(15) is True


def test_controller_paging_never_fetches(client, logged_in, session):
    controller = CategoryListController(client, logged_in)
    controller.records = [{"id": str(i), "name": f"c{i}"} for i in range(23)]

    assert controller.total_pages == 3
    assert controller.go_to_page(3) is True
    assert [c["id"] for c in controller.page_items()] == ["20", "21", "22"]
    assert controller.go_to_page(4) is False
    assert controller.current_page == 3
    session.request.assert_not_called()


class TestClamp:
    def test_pulls_back_to_last_page(self):
        p = Paginator()
        p.go_to(3, 25)
        p.clamp(15)
        assert p.current_page == 2

    def test_keeps_page_still_in_range(self):
        p = Paginator()
        p.go_to(2, 25)
        p.clamp(11)
        assert p.current_page == 2

    def test_empty_list_lands_on_first_page(self):
        p = Paginator()
        p.go_to(2, 25)
        p.clamp(0)
        assert p.current_page == 1
