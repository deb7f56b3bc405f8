"""Paginator for V1 API queries, based on record index windows."""

from typing import Any

from ..core.pagination import PAGE_MAX_SIZE
from ..core.pagination import QueryPaginator as BaseQueryPaginator
from ..core.response import Response

MODIFIED_TIME_FIELD = "Modified Time"


class QueryPaginator(BaseQueryPaginator):
    """
    Fetches the pages of a V1 query with "fromIndex"/"toIndex" windows.

    Indexes are 1-based and inclusive: page 0 is records 1 to 200,
    page 1 is records 201 to 400, and so on.

    Two constraints of the query can end the pagination early: a maximum
    modification date (see QueryPaginator.cut_off_page) and a record limit,
    which truncates the page reaching it.
    """

    def get_page_query(self, cursor: int) -> Any:
        size = self.get_page_size()
        from_index = cursor * size + 1

        return self.query.copy().auto_paginated(False).params({
            "fromIndex": from_index,
            "toIndex": from_index + size - 1,
        })

    def get_page_size(self) -> int:
        return PAGE_MAX_SIZE

    def handle_page(self, page: Response) -> Response:
        if page.is_empty():
            return super().handle_page(page)

        max_date = self.query.get_max_modification_date()
        if max_date is not None:
            self.cut_off_page(page, MODIFIED_TIME_FIELD, max_date)

        limit = self.query.get_limit()
        if limit is None:
            return super().handle_page(page)

        remaining = limit - self.items_fetched
        if len(page.content) < remaining:
            return super().handle_page(page)

        page.content = type(page.content)(page.content[:remaining])
        super().handle_page(page)
        self.stop()

        return page
