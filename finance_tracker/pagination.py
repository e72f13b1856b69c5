# finance_tracker/pagination.py
import math

ITEMS_PER_PAGE = 10


class Paginator:
    """Client-side paging over an already loaded list."""

    def __init__(self, page_size=ITEMS_PER_PAGE):
        self.page_size = page_size
        self.current_page = 1

    def total_pages(self, total_items):
        return math.ceil(total_items / self.page_size)

    def go_to(self, page, total_items):
        """Move to ``page``; pages outside 1..total_pages are ignored"""
        if 1 <= page <= self.total_pages(total_items):
            self.current_page = page
            return True
        return False

    def page_slice(self, items):
        start = (self.current_page - 1) * self.page_size
        return items[start:start + self.page_size]

    def row_number(self, index):
        """1-based serial number of the ``index``-th row on the current page"""
        return (self.current_page - 1) * self.page_size + index + 1

    def clamp(self, total_items):
        """Pull the current page back inside the list after it shrank"""
        self.current_page = min(self.current_page, max(1, self.total_pages(total_items)))

    def has_previous(self):
        return self.current_page > 1

    def has_next(self, total_items):
        return self.current_page < self.total_pages(total_items)
